from fastapi.responses import JSONResponse

# Error codes shared by services, repositories and routers
MISSING_TOKEN = "MISSING_TOKEN"
INVALID_TOKEN = "INVALID_TOKEN"
NOT_FOUND = "NOT_FOUND"
ALREADY_EXISTS = "ALREADY_EXISTS"
INVALID_PLAN_TYPE = "INVALID_PLAN_TYPE"
MISSING_FIELDS = "MISSING_FIELDS"
STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
ENDPOINT_NOT_FOUND = "ENDPOINT_NOT_FOUND"
INTERNAL_ERROR = "INTERNAL_ERROR"

ERROR_STATUS = {
    MISSING_TOKEN: 401,
    INVALID_TOKEN: 403,
    NOT_FOUND: 404,
    ALREADY_EXISTS: 409,
    INVALID_PLAN_TYPE: 400,
    MISSING_FIELDS: 400,
    STORE_UNAVAILABLE: 500,
    ENDPOINT_NOT_FOUND: 404,
    INTERNAL_ERROR: 500,
}


def success_response(data=None, message="OK", status=200):
    return JSONResponse(
        status_code=status,
        content={
            "ok": True,
            "data": data or {},
            "error": None,
            "message": message,
        }
    )


def error_response(error_code, status=400, message="An error occurred", data=None):
    return JSONResponse(
        status_code=status,
        content={
            "ok": False,
            "data": data or {},
            "error": error_code,
            "message": message,
        }
    )


def error_result(error_code, message):
    """Normalized failure result returned by services and repositories."""
    return {"error": error_code, "message": message, "is_error": True}


def error_from_result(result):
    """Convert a failure result into its HTTP response."""
    code = result.get("error", INTERNAL_ERROR)
    return error_response(
        code,
        status=ERROR_STATUS.get(code, 500),
        message=result.get("message", "An error occurred"),
    )

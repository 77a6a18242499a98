from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi import status
from tagform.constants.error import ERROR

# (field, pydantic error type) pairs that get a friendlier message
FIELD_MESSAGES = {
    ("email", "value_error"): ERROR.INVALID_EMAIL,
    ("password", "string_too_short"): ERROR.WEAK_PASSWORD,
}


def validation_exception_handler(request, exc: RequestValidationError):

    errors = []

    for err in exc.errors():
        field = err["loc"][-1]

        default_msg = err["msg"]

        if err["type"] == "missing":
            custom_msg = getattr(ERROR, f"REQUIRED_{str(field).upper()}", default_msg)
        else:
            custom_msg = FIELD_MESSAGES.get((field, err["type"]), default_msg)

        errors.append({
            "field": field,
            "message": custom_msg
        })

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "statusCode": 400,
            "errors": "Validation failed",
            "message": errors
        }
    )

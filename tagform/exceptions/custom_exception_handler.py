from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from tagform.exceptions.custom_exception import CustomException


def custom_exception_handler(request, exc: CustomException):
    content = {
        "statusCode": exc.status_code,
        "message": exc.message
    }
    if exc.data is not None:
        content["data"] = jsonable_encoder(exc.data)

    return JSONResponse(status_code=exc.status_code, content=content)

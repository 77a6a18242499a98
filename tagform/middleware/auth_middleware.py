from fastapi import Depends, Request
from sqlalchemy.orm import Session
from tagform.config.database_config import get_db
from tagform.config.env_config import settings
from tagform.constants.error import ERROR
from tagform.exceptions.custom_exception import CustomException
from tagform.schema.user_schema import UserData
from tagform.services.user_service import is_token_revoked
from tagform.utils.auth_utils import extract_bearer_token, verify_jwt
from tagform.utils.logger_utils import handle_middleware_error


def auth_middleware(request: Request, db: Session = Depends(get_db)):
    try:
        token = extract_bearer_token(request.headers.get("Authorization"))
        if token is None:
            raise CustomException(status_code=401, message=ERROR.NO_TOKEN)

        user = verify_jwt(
            token=token,
            secret_key=settings.SECRET_KEY,
            algorithm=settings.ALGORITHM
        )

        if not user:
            raise CustomException(status_code=401, message=ERROR.UNAUTHORIZED)

        if is_token_revoked(db, user.get("jti")):
            raise CustomException(status_code=401, message=ERROR.UNAUTHORIZED)

        request.state.user = UserData(**user)

    except CustomException as e:
        handle_middleware_error(error=e, context="auth_middleware")
    except Exception as e:
        handle_middleware_error(
            error=e,
            context="auth_middleware",
            custom_exception=CustomException(status_code=401, message=ERROR.UNAUTHORIZED)
        )

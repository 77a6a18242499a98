from datetime import datetime
import logging

import httpx
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from tagform.config.env_config import settings
from tagform.constants.error import ERROR
from tagform.exceptions import CustomException
from tagform.models.user_model import User, RevokedToken
from tagform.schema.user_schema import RegisterRequest, SignInRequest, UserData
from tagform.utils.auth_utils import hash_password, verify_password, generate_jwt
from tagform.utils.logger_utils import handle_service_error

logger = logging.getLogger(__name__)


def _serialize_user(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "full_name": user.full_name,
        "created_at": user.created_at,
    }


def _issue_tokens(user: User) -> dict:
    user_data = {
        "id": user.id,
        "email": user.email,
        "name": user.full_name,
    }

    auth_token = generate_jwt(
        data=user_data,
        expire_minutes=settings.ACCESS_TOKEN_EXP_TIME,
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )
    refresh_token = generate_jwt(
        data=user_data,
        expire_minutes=settings.REFRESH_TOKEN_EXP_TIME,
        secret_key=settings.REFRESH_SECRET_KEY,
        algorithm=settings.ALGORITHM
    )
    return {"authToken": auth_token, "refreshToken": refresh_token, "user": user_data}


def register_user(db: Session, data: RegisterRequest) -> dict:
    """
    Create a password account. Email uniqueness is enforced by the unique index.
    """
    try:
        email = data.email.lower()
        if db.query(User.id).filter(User.email == email).first():
            raise CustomException(status_code=409, message=ERROR.EMAIL_ALREADY_EXISTS)

        user = User(
            email=email,
            full_name=data.fullName.strip(),
            password=hash_password(data.password),
        )
        db.add(user)
        db.commit()
        db.refresh(user)

        logger.info(f"User {user.id} registered")
        return _serialize_user(user)

    except IntegrityError:
        db.rollback()
        raise CustomException(status_code=409, message=ERROR.EMAIL_ALREADY_EXISTS)
    except Exception as e:
        db.rollback()
        handle_service_error(error=e, context="register_user")


def sign_in_user(db: Session, data: SignInRequest) -> dict:
    try:
        user = db.query(User).filter(User.email == data.email.lower()).first()

        # Same message for unknown email and wrong password
        if not user or not user.password:
            raise CustomException(status_code=401, message=ERROR.INVALID_CREDENTIALS)
        if not verify_password(password=data.password, hashed=user.password):
            raise CustomException(status_code=401, message=ERROR.INVALID_CREDENTIALS)

        return _issue_tokens(user)

    except Exception as e:
        handle_service_error(error=e, context="sign_in_user")


def build_google_auth_url() -> dict:
    """Authorization URL for the Google OAuth consent screen"""
    url = httpx.URL(
        settings.GOOGLE_AUTH_URL,
        params={
            "client_id": settings.GOOGLE_CLIENT_ID,
            "redirect_uri": f"{settings.CLIENT_URL}/auth/callback",
            "response_type": "code",
            "scope": "openid email profile",
            "access_type": "offline",
        },
    )
    return {"provider": "google", "url": str(url)}


def revoke_token(db: Session, user: UserData) -> None:
    try:
        if not user.jti:
            raise CustomException(status_code=401, message=ERROR.UNAUTHORIZED)

        # Drop revocations whose token has already expired
        db.query(RevokedToken).filter(RevokedToken.expires_at < datetime.utcnow()).delete(synchronize_session=False)

        if not db.get(RevokedToken, user.jti):
            db.add(RevokedToken(
                jti=user.jti,
                user_id=user.id,
                expires_at=datetime.utcfromtimestamp(user.exp),
            ))
        db.commit()

        logger.info(f"Token revoked for user {user.id}")

    except Exception as e:
        db.rollback()
        handle_service_error(error=e, context="revoke_token")


def is_token_revoked(db: Session, jti: str | None) -> bool:
    if not jti:
        return False
    return db.get(RevokedToken, jti) is not None

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from tagform.services import user_service
from tagform.services.email_service import send_welcome_email
from tagform.schema.common_schema import api_response
from tagform.schema.user_schema import RegisterRequest, SignInRequest
from tagform.config.database_config import get_db
from tagform.constants.messages import MESSAGE
from tagform.middleware.auth_middleware import auth_middleware
from tagform.utils.logger_utils import handle_route_error
import logging

logger = logging.getLogger(__name__)

auth_controller = APIRouter()


@auth_controller.post("/register", response_model=dict, status_code=201)
async def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """
    Create a password account and trigger the welcome email webhook
    """
    try:
        user = user_service.register_user(db, data)

        email_sent = await send_welcome_email(user_email=user["email"], user_name=user["full_name"])
        if not email_sent:
            logger.warning(f"Welcome email failed to send for {user['email']}")

        return api_response(201, MESSAGE.USER_REGISTERED, {"user": user})
    except Exception as e:
        handle_route_error(error=e, context="POST /api/auth/register")


@auth_controller.post("/login", response_model=dict)
def login(data: SignInRequest, db: Session = Depends(get_db)):
    try:
        response = user_service.sign_in_user(db, data)
        return api_response(200, MESSAGE.AUTH_SUCCESS, response)
    except Exception as e:
        handle_route_error(error=e, context="POST /api/auth/login")


@auth_controller.get("/google", response_model=dict)
@auth_controller.post("/google", response_model=dict)
def google_sign_in():
    """
    Authorization URL for signing in with Google
    """
    return api_response(200, MESSAGE.GOOGLE_URL, user_service.build_google_auth_url())


@auth_controller.post("/logout", response_model=dict, dependencies=[Depends(auth_middleware)])
def logout(request: Request, db: Session = Depends(get_db)):
    try:
        user_service.revoke_token(db, request.state.user)
        return api_response(200, MESSAGE.LOGOUT_SUCCESS)
    except Exception as e:
        handle_route_error(error=e, context="POST /api/auth/logout")


@auth_controller.get("/profile", response_model=dict, dependencies=[Depends(auth_middleware)])
def profile(request: Request):
    user = request.state.user
    return api_response(200, MESSAGE.PROFILE_FOUND, {
        "user": {"id": user.id, "email": user.email, "name": user.name}
    })

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from tagform.config.database_config import Base, engine
from tagform.config.env_config import settings
from tagform.config.logger_config import setup_logging
from tagform.exceptions import (
    CustomException, custom_exception_handler, validation_exception_handler, unhandled_exception_handler
)
from tagform.models import (  # noqa: F401  registers every table on Base.metadata
    analytics_model, form_model, question_model, submission_model, user_model, workspace_model
)
from tagform.routes.auth_router import auth_controller
from tagform.routes.workspace_router import workspace_controller
from tagform.routes.form_router import form_controller
from tagform.routes.question_router import question_controller
from tagform.routes.submission_router import submission_controller
from tagform.routes.analytics_router import analytics_controller
from tagform.routes.public_router import public_controller
from tagform.utils.logger_utils import log_info

# Initialize logging
setup_logging()

app = FastAPI(
    title="TagForm API",
    swagger_ui_parameters={
        "persistAuthorization": True
    }
)

log_info(context="APP_STARTUP", message="FastAPI application started")


@app.get("/health")
def server_life_check():
    return {"statusCode": 200, "data": "Your server is running successfully"}


Base.metadata.create_all(bind=engine)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(CustomException, custom_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

FORMS_PREFIX = "/api/workspaces/{workspace_id}/forms"

app.include_router(auth_controller, prefix="/api/auth", tags=["Auth"])
app.include_router(workspace_controller, prefix="/api/workspaces", tags=["Workspaces"])
app.include_router(form_controller, prefix=FORMS_PREFIX, tags=["Forms"])
app.include_router(question_controller, prefix=FORMS_PREFIX, tags=["Questions"])
app.include_router(submission_controller, prefix=FORMS_PREFIX, tags=["Submissions"])
app.include_router(analytics_controller, prefix=FORMS_PREFIX, tags=["Analytics"])
app.include_router(public_controller, prefix="/api/forms", tags=["Public"])

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,  # Allowed frontend URLs
    allow_credentials=True,
    allow_methods=["*"],  # GET, POST, PUT, DELETE...
    allow_headers=["*"],  # Authorization, Content-Type, etc.
)

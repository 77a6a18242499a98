import httpx
from tagform.config.env_config import settings
import logging

logger = logging.getLogger(__name__)


async def send_welcome_email(user_email: str, user_name: str) -> bool:
    """
    Trigger the email webhook that sends the welcome mail after registration

    Args:
        user_email: User's email address
        user_name: User's full name

    Returns:
        True when the webhook accepted the request. Failures are logged and
        reported as False; registration never fails because of email.
    """
    try:
        payload = {
            "email": user_email,
            "name": user_name,
            "subject": "Welcome to TagForm!",
        }

        async with httpx.AsyncClient(timeout=settings.EMAIL_WEBHOOK_TIMEOUT) as client:
            response = await client.post(settings.EMAIL_WEBHOOK_WELCOME, json=payload)
            response.raise_for_status()
            logger.info(f"Welcome email triggered for {user_email}")
            return True
    except httpx.HTTPError as e:
        logger.error(f"Failed to trigger welcome email for {user_email}: {str(e)}")
        return False

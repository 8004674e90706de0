import logging
from typing import Optional

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)


class EmailDeliveryError(RuntimeError):
    pass


class EmailSender:
    """Base email sender; subclasses implement ``send``."""

    async def send(self, *, to_email: str, subject: str, html: str, text: Optional[str] = None) -> None:
        raise NotImplementedError

    async def send_otp(self, to_email: str, code: str, ttl_seconds: int) -> None:
        minutes = max(1, ttl_seconds // 60)
        html = f"""
        <div style="font-family:Arial,sans-serif">
          <h2>Login OTP</h2>
          <p>Your OTP is:</p>
          <div style="font-size:28px;font-weight:700;letter-spacing:2px">{code}</div>
          <p>This OTP expires in {minutes} minutes.</p>
        </div>
        """
        await self.send(
            to_email=to_email,
            subject=settings.OTP_SUBJECT,
            html=html,
            text=f"Your OTP is {code}. It expires in {minutes} minutes.",
        )


class ConsoleEmailSender(EmailSender):
    """Logs messages instead of sending them. Development only."""

    async def send(self, *, to_email: str, subject: str, html: str, text: Optional[str] = None) -> None:
        logger.info("Email to %s [%s]: %s", to_email, subject, text or html)


class BrevoEmailSender(EmailSender):
    """Sends through the Brevo transactional email API."""

    def __init__(self, api_key: str, from_email: str, from_name: str = "", timeout: float = 15.0,
                 api_url: str = "https://api.brevo.com/v3/smtp/email"):
        self.api_key = api_key
        self.from_email = from_email
        self.from_name = from_name
        self.api_url = api_url
        self._timeout = timeout

    async def send(self, *, to_email: str, subject: str, html: str, text: Optional[str] = None) -> None:
        if not self.api_key:
            raise EmailDeliveryError("BREVO_API_KEY is not set")
        if not self.from_email:
            raise EmailDeliveryError("EMAIL_FROM is not set")

        payload = {
            "sender": {"email": self.from_email, "name": self.from_name},
            "to": [{"email": to_email}],
            "subject": subject,
            "htmlContent": html,
        }
        if text:
            payload["textContent"] = text

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(
                    self.api_url,
                    json=payload,
                    headers={
                        "accept": "application/json",
                        "api-key": self.api_key,
                        "content-type": "application/json",
                    },
                )
        except httpx.HTTPError as exc:
            raise EmailDeliveryError(f"Brevo request failed: {exc}") from exc

        if resp.status_code >= 300:
            raise EmailDeliveryError(f"Brevo send failed ({resp.status_code}): {resp.text}")


def get_email_sender() -> EmailSender:
    """Sender selected by ``EMAIL_BACKEND``."""
    if settings.EMAIL_BACKEND == "brevo":
        return BrevoEmailSender(
            api_key=settings.BREVO_API_KEY,
            from_email=settings.EMAIL_FROM,
            from_name=settings.EMAIL_FROM_NAME,
            timeout=settings.EMAIL_TIMEOUT_SECONDS,
            api_url=settings.BREVO_API_URL,
        )
    return ConsoleEmailSender()

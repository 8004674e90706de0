import logging
from typing import Optional

from app.core.config import settings
from app.core.exceptions import UpstreamError, ValidationError
from app.db.mongo import store_errors
from app.repositories.team_repo import TeamRepository
from app.schemas.auth import LoginRequestResult
from app.services.email_service import EmailDeliveryError, EmailSender
from app.services.otp_service import OtpStatus, OtpStore

logger = logging.getLogger(__name__)


class LoginService:
    """Email OTP login: issue a code to known members, then check it."""

    def __init__(self, repo: TeamRepository, otp_store: OtpStore, email_sender: EmailSender):
        self.repo = repo
        self.otp_store = otp_store
        self.email_sender = email_sender

    async def request_login(self, email: Optional[str]) -> LoginRequestResult:
        """
        Send a login code if the email belongs to any member.

        Unknown emails get no code. If sending fails the code stays in the
        store and remains usable until it expires.
        """
        email = (email or "").strip()
        if not email:
            raise ValidationError("Email is required")

        with store_errors("look up email"):
            member_doc = await self.repo.find_member_by_email(email)
            if member_doc is None:
                logger.info("Login requested for unknown email %s", email)
                return LoginRequestResult(email_exists=False)
            is_privileged = await self.repo.email_in_team(email, settings.PRIVILEGED_TEAM_ID)

        code = self.otp_store.issue(email)
        try:
            await self.email_sender.send_otp(email, code, settings.OTP_TTL_SECONDS)
        except EmailDeliveryError as exc:
            logger.exception("Failed to send OTP email to %s", email)
            raise UpstreamError("Failed to send OTP email", cause=exc) from exc

        return LoginRequestResult(email_exists=True, is_privileged=is_privileged, otp_sent=True)

    def verify_otp(self, email: Optional[str], code: Optional[str]) -> OtpStatus:
        if not email or not email.strip() or not code:
            raise ValidationError("Email and OTP are required")
        return self.otp_store.verify(email, code)

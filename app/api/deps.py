from fastapi import Depends, Request

from app.db.mongo import get_db
from app.repositories.team_repo import TeamRepository
from app.services.email_service import EmailSender, get_email_sender
from app.services.login_service import LoginService
from app.services.member_service import MemberService
from app.services.otp_service import OtpStore


def get_team_repository(db = Depends(get_db)) -> TeamRepository:
    return TeamRepository(db)


def get_member_service(repo: TeamRepository = Depends(get_team_repository)) -> MemberService:
    return MemberService(repo)


def get_otp_store(request: Request) -> OtpStore:
    """The application's OTP table, created with the app."""
    return request.app.state.otp_store


def get_login_service(
    repo: TeamRepository = Depends(get_team_repository),
    otp_store: OtpStore = Depends(get_otp_store),
    email_sender: EmailSender = Depends(get_email_sender)
) -> LoginService:
    return LoginService(repo, otp_store, email_sender)

"""
In-process table of login one-time passwords.

Codes are keyed by normalized email and live only in memory: a restart
forgets every outstanding code. Issuing a code for an email replaces any
code still pending for it.
"""
import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OtpStatus(str, Enum):
    VERIFIED = "verified"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    INVALID = "invalid"


@dataclass
class OtpRecord:
    code: str
    expires_at: datetime


class OtpStore:
    def __init__(self, ttl_seconds: int = 300, clock: Callable[[], datetime] = _utcnow):
        self.ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._records: Dict[str, OtpRecord] = {}

    @staticmethod
    def normalize(email: str) -> str:
        return email.strip().lower()

    @staticmethod
    def generate_code() -> str:
        """Uniform 6-digit code in 100000-999999."""
        return f"{100000 + secrets.randbelow(900000):06d}"

    def issue(self, email: str) -> str:
        """Create a fresh code for ``email``, superseding any pending one."""
        self.purge_expired()
        key = self.normalize(email)
        code = self.generate_code()
        self._records[key] = OtpRecord(code=code, expires_at=self._clock() + self.ttl)
        logger.info("Issued OTP for %s, valid for %ds", key, int(self.ttl.total_seconds()))
        return code

    def get(self, email: str) -> Optional[OtpRecord]:
        return self._records.get(self.normalize(email))

    def verify(self, email: str, code: str) -> OtpStatus:
        """
        Check ``code`` against the pending record.

        A match consumes the record. An expired record is removed and
        reported as expired once; later attempts see not found. A wrong
        code leaves the record in place so the user can retry until expiry.
        """
        key = self.normalize(email)
        record = self._records.get(key)
        if record is None:
            return OtpStatus.NOT_FOUND

        if self._clock() > record.expires_at:
            self._records.pop(key, None)
            logger.info("OTP for %s expired", key)
            return OtpStatus.EXPIRED

        if not hmac.compare_digest(record.code.encode(), code.strip().encode()):
            logger.info("Invalid OTP submitted for %s", key)
            return OtpStatus.INVALID

        self._records.pop(key, None)
        logger.info("OTP verified for %s", key)
        return OtpStatus.VERIFIED

    def purge_expired(self) -> int:
        """Drop every expired record; returns how many were removed."""
        now = self._clock()
        expired = [key for key, record in self._records.items() if now > record.expires_at]
        for key in expired:
            del self._records[key]
        return len(expired)

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)

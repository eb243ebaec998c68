"""
One-time password generation, verification and delivery.
"""
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from ..config import settings

logger = logging.getLogger(__name__)


@dataclass
class OtpCheck:
    success: bool
    message: str


def generate_otp(length: Optional[int] = None) -> str:
    """Random numeric code without a leading zero, e.g. ``483920``."""
    length = length or settings.otp_length
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(9 * low))


def otp_expiry(now: Optional[datetime] = None) -> datetime:
    return (now or datetime.utcnow()) + timedelta(minutes=settings.otp_expire_minutes)


def is_otp_expired(user: Dict[str, Any], now: Optional[datetime] = None) -> bool:
    expire = user.get("otp_expire")
    return expire is None or expire < (now or datetime.utcnow())


def check_otp(user: Dict[str, Any], otp: str, now: Optional[datetime] = None) -> OtpCheck:
    """Expiry is checked before the code itself."""
    if is_otp_expired(user, now):
        return OtpCheck(False, "OTP has expired")
    if not user.get("otp") or not secrets.compare_digest(str(user["otp"]), otp):
        return OtpCheck(False, "OTP is incorrect")
    return OtpCheck(True, "OTP verified successfully")


async def send_otp(mobile_number: str, otp: str) -> bool:
    """
    Deliver an OTP to a mobile number.

    No SMS gateway is wired in; the code is written to the log so that it can
    be read in development.
    """
    logger.info(f"📱 OTP for {mobile_number}: {otp} (valid {settings.otp_expire_minutes} minutes)")
    return True

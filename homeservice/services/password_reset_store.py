import datetime
import secrets

from flask import current_app
from sqlalchemy import delete

from ..extensions import db
from ..models import PasswordResetCode
from .exceptions import ValidationError


def generate_otp():
    """Six-digit one-time passcode."""
    return f"{secrets.randbelow(900000) + 100000}"


class PasswordResetStore:
    """
    Expiring email -> passcode storage shared by every app instance.

    Expired entries are dropped lazily when looked up; purge_expired()
    clears the rest and is run by the scheduler when enabled.
    """

    def __init__(self, session=None, clock=datetime.datetime.now):
        self.session = session or db.session
        self.clock = clock

    def set(self, email, code, ttl_minutes=None):
        if ttl_minutes is None:
            ttl_minutes = current_app.config["OTP_TTL_MINUTES"]
        expires_at = self.clock() + datetime.timedelta(minutes=ttl_minutes)

        entry = self.session.get(PasswordResetCode, email)
        if entry:
            entry.code = code
            entry.expires_at = expires_at
        else:
            entry = PasswordResetCode(email=email, code=code, expires_at=expires_at)
            self.session.add(entry)
        self.session.commit()
        return entry

    def get(self, email):
        """Return the live entry for email, or None if absent or expired."""
        entry = self.session.get(PasswordResetCode, email)
        if entry is None:
            return None
        if entry.expires_at <= self.clock():
            self.session.delete(entry)
            self.session.commit()
            return None
        return entry

    def check(self, email, code):
        """Return the live entry if code matches, otherwise raise ValidationError."""
        known = self.session.get(PasswordResetCode, email) is not None
        entry = self.get(email)
        if entry is None:
            if known:
                raise ValidationError("OTP has expired. Please request a new one")
            raise ValidationError("Invalid or expired OTP")
        if not secrets.compare_digest(entry.code, str(code)):
            raise ValidationError("Invalid OTP")
        return entry

    def delete(self, email):
        entry = self.session.get(PasswordResetCode, email)
        if entry:
            self.session.delete(entry)
            self.session.commit()

    def purge_expired(self):
        result = self.session.execute(
            delete(PasswordResetCode).where(PasswordResetCode.expires_at <= self.clock())
        )
        self.session.commit()
        return result.rowcount or 0

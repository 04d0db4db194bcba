from flask import current_app
from okfees import db
from okfees.models.user import User
from okfees.models.recovery_code import RecoveryCode
from okfees.services.email_service import EmailService
from okfees.utils.password_validator import PasswordValidator
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

GENERIC_REQUEST_MESSAGE = "If an account with that email exists, a verification code has been sent."


class PasswordRecoveryService:
    """One-time code issue, verification and password update"""

    @staticmethod
    def _find_user(email: str) -> Optional[User]:
        return User.query.filter(db.func.lower(User.email) == (email or '').strip().lower()).first()

    @staticmethod
    def _usable_code(user: User, code: str) -> Optional[RecoveryCode]:
        pending = (RecoveryCode.query
                   .filter_by(user_id=user.id, status='pending')
                   .order_by(RecoveryCode.created_at.desc(), RecoveryCode.id.desc())
                   .all())
        for record in pending:
            if record.is_usable() and record.matches(code):
                return record
        return None

    @staticmethod
    def request_code(email: str) -> Tuple[bool, str]:
        """Issue a new code for ``email`` and mail it"""
        try:
            user = PasswordRecoveryService._find_user(email)
            if not user:
                # Don't reveal whether the email exists
                current_app.logger.info(f"Recovery code requested for unknown email {email}")
                return True, GENERIC_REQUEST_MESSAGE

            # Earlier unused codes stop working once a new one is issued
            RecoveryCode.query.filter_by(user_id=user.id, status='pending').update({'status': 'superseded'})

            code = RecoveryCode.generate_code(current_app.config.get('RECOVERY_CODE_LENGTH', 6))
            ttl = current_app.config.get('RECOVERY_CODE_TTL_MINUTES', 60)
            db.session.add(RecoveryCode(user_id=user.id, code=code, ttl_minutes=ttl))
            db.session.commit()

            if not EmailService.send_recovery_code(user.email, code, ttl):
                return False, "Failed to send the verification code. Please try again."

            return True, GENERIC_REQUEST_MESSAGE

        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"Error issuing recovery code: {str(e)}")
            return False, "An error occurred while processing your request"

    @staticmethod
    def verify_code(email: str, code: str) -> Tuple[bool, str]:
        """Check the code without consuming it"""
        try:
            user = PasswordRecoveryService._find_user(email)
            if not user or not PasswordRecoveryService._usable_code(user, code):
                return False, "Invalid or expired verification code"
            return True, "Code verified"
        except Exception as e:
            current_app.logger.error(f"Error verifying recovery code: {str(e)}")
            return False, "An error occurred while verifying the code"

    @staticmethod
    def update_password(email: str, code: str, new_password: str) -> Tuple[bool, str]:
        """Set the new password and consume the code in one commit"""
        try:
            user = PasswordRecoveryService._find_user(email)
            record = PasswordRecoveryService._usable_code(user, code) if user else None
            if not record:
                return False, "Invalid or expired verification code"

            user.set_password(new_password)
            record.mark_used()
            db.session.commit()
            return True, "Your password has been updated. Please log in."

        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"Error updating password: {str(e)}")
            return False, "Failed to update password"


class RecoveryStep(Enum):
    AWAITING_EMAIL = 'awaiting_email'
    AWAITING_CODE = 'awaiting_code'
    DONE = 'done'


class PasswordRecoveryFlow:
    """
    Two-step recovery: request a code by email, then submit the code with a
    new password. Input is checked locally before the service is called.
    """

    def __init__(self, step=RecoveryStep.AWAITING_EMAIL, email=None,
                 service=PasswordRecoveryService, min_length=6):
        self.step = step
        self.email = email
        self.service = service
        self.validator = PasswordValidator(min_length)

    def submit_email(self, email: str) -> Tuple[bool, str]:
        if self.step != RecoveryStep.AWAITING_EMAIL:
            return False, "A verification code has already been requested"
        email = (email or '').strip()
        if not email:
            return False, "Email address is required"

        ok, message = self.service.request_code(email)
        if ok:
            self.email = email
            self.step = RecoveryStep.AWAITING_CODE
        return ok, message

    def submit_code(self, code: str, new_password: str, confirm_password: str) -> Tuple[bool, str]:
        if self.step != RecoveryStep.AWAITING_CODE:
            return False, "Request a verification code first"
        code = (code or '').strip()
        if not code:
            return False, "Verification code is required"
        is_valid, issues = self.validator.validate_password(new_password, confirm_password)
        if not is_valid:
            return False, issues[0]

        ok, message = self.service.verify_code(self.email, code)
        if not ok:
            return False, message
        ok, message = self.service.update_password(self.email, code, new_password)
        if not ok:
            return False, message

        self.step = RecoveryStep.DONE
        return True, message

    def restart(self) -> None:
        """Go back to the email step, dropping the email in use"""
        self.step = RecoveryStep.AWAITING_EMAIL
        self.email = None

    def to_dict(self):
        return {'step': self.step.value, 'email': self.email}

    @classmethod
    def from_dict(cls, data, **kwargs):
        data = data or {}
        try:
            step = RecoveryStep(data.get('step'))
        except ValueError:
            step = RecoveryStep.AWAITING_EMAIL
        return cls(step=step, email=data.get('email'), **kwargs)

from okfees import db
from datetime import datetime, timedelta
from werkzeug.security import generate_password_hash, check_password_hash
import secrets
import string

class RecoveryCode(db.Model):
    __tablename__ = 'recovery_codes'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False)
    code_hash = db.Column(db.String(256), nullable=False)
    status = db.Column(db.String(20), default='pending')  # pending, used, superseded

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    expires_at = db.Column(db.DateTime)
    used_at = db.Column(db.DateTime)

    user = db.relationship('User', backref=db.backref('recovery_codes', lazy=True, cascade='all, delete-orphan'))

    def __init__(self, user_id, code, ttl_minutes=60):
        self.user_id = user_id
        self.code_hash = generate_password_hash(code)
        self.status = 'pending'
        self.expires_at = datetime.utcnow() + timedelta(minutes=ttl_minutes)

    @staticmethod
    def generate_code(length=6):
        """Generate a numeric one-time code"""
        return ''.join(secrets.choice(string.digits) for _ in range(length))

    def is_expired(self):
        """Check if the code has expired"""
        return datetime.utcnow() > self.expires_at

    def is_usable(self):
        return self.status == 'pending' and not self.is_expired()

    def matches(self, code):
        return check_password_hash(self.code_hash, code or '')

    def mark_used(self):
        self.status = 'used'
        self.used_at = datetime.utcnow()

    def __repr__(self):
        return f'<RecoveryCode {self.id} for User {self.user_id} ({self.status})>'

from okfees import db, login_manager
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from datetime import datetime, timedelta

MAX_LOGIN_ATTEMPTS = 3
LOCK_MINUTES = 15

class User(UserMixin, db.Model):
    """An institute administrator; owns every row they create."""
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Fields for login security
    login_attempts = db.Column(db.Integer, default=0)
    last_login_attempt = db.Column(db.DateTime)
    is_locked = db.Column(db.Boolean, default=False)
    lock_until = db.Column(db.DateTime)

    profile = db.relationship('Profile', backref='user', uselist=False, cascade='all, delete-orphan')

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)
        # Reset login attempts when password is changed
        self.login_attempts = 0
        self.is_locked = False
        self.lock_until = None

    def check_password(self, password):
        # Check if account is locked
        if self.is_locked and self.lock_until and datetime.utcnow() < self.lock_until:
            return False

        is_correct = check_password_hash(self.password_hash or '', password or '')

        # Update login attempts
        if is_correct:
            self.login_attempts = 0
            self.last_login_attempt = datetime.utcnow()
            self.is_locked = False
            self.lock_until = None
        else:
            self.login_attempts = (self.login_attempts or 0) + 1
            self.last_login_attempt = datetime.utcnow()

            if self.login_attempts >= MAX_LOGIN_ATTEMPTS:
                self.is_locked = True
                self.lock_until = datetime.utcnow() + timedelta(minutes=LOCK_MINUTES)

        db.session.commit()
        return is_correct

    def is_account_locked(self):
        if not self.is_locked:
            return False
        if not self.lock_until:
            return False
        return datetime.utcnow() < self.lock_until

    def get_lock_time_remaining(self):
        if not self.is_locked or not self.lock_until:
            return 0
        remaining = self.lock_until - datetime.utcnow()
        return max(0, int(remaining.total_seconds() / 60))

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

@login_manager.user_loader
def load_user(id):
    return db.session.get(User, int(id))

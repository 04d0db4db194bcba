"""Session guard for the admin screens.

Every guarded view receives a ``SessionContext`` as its first argument and
builds its repositories from it; nothing downstream looks at
``current_user``. Sign-out and expiry end the context, after which any
further data access raises ``SessionEnded`` and the request is sent to the
login page.
"""
from datetime import datetime, timedelta
from functools import wraps
from typing import Callable, List, Optional

from flask import current_app, g, session as flask_session
from flask_login import current_user, logout_user, user_logged_in, user_logged_out

from okfees import login_manager

SIGNED_IN_AT_KEY = '_okfees_signed_in_at'


class SessionEnded(Exception):
    def __init__(self, reason: str = 'ended'):
        super().__init__(f'Session {reason}')
        self.reason = reason


class SessionContext:
    def __init__(self, principal_id: int, email: Optional[str] = None,
                 started_at: Optional[datetime] = None, lifetime: Optional[timedelta] = None):
        self.principal_id = principal_id
        self.email = email
        self.started_at = started_at or datetime.utcnow()
        self.lifetime = lifetime
        self.ended_reason: Optional[str] = None
        self._subscribers: List[Callable] = []

    @property
    def owner_id(self) -> int:
        return self.principal_id

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.lifetime is None:
            return False
        return (now or datetime.utcnow()) >= self.started_at + self.lifetime

    @property
    def is_active(self) -> bool:
        return self.ended_reason is None and not self.is_expired()

    def subscribe(self, callback: Callable) -> Callable[[], None]:
        """Call ``callback(context, reason)`` when the session ends."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)
        return unsubscribe

    def end(self, reason: str) -> None:
        if self.ended_reason is not None:
            return
        self.ended_reason = reason
        for callback in list(self._subscribers):
            callback(self, reason)

    def require_active(self) -> None:
        if self.ended_reason is None and self.is_expired():
            self.end('expired')
        if self.ended_reason is not None:
            raise SessionEnded(self.ended_reason)

    def __repr__(self):
        state = self.ended_reason or 'active'
        return f'<SessionContext principal={self.principal_id} {state}>'


def _signed_in_at() -> datetime:
    raw = flask_session.get(SIGNED_IN_AT_KEY)
    if raw:
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            pass
    # Sessions restored without a recorded sign-in start counting now
    now = datetime.utcnow()
    flask_session[SIGNED_IN_AT_KEY] = now.isoformat()
    return now


def current_context() -> Optional[SessionContext]:
    return g.get('_okfees_session_context')


def _forget_context(ctx, reason):
    current_app.logger.info(f'Session {reason} for principal {ctx.principal_id}')
    if g.get('_okfees_session_context') is ctx:
        g.pop('_okfees_session_context')


def session_guard(view):
    """Resolve the principal before the view runs; redirect to login without one."""
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not current_user.is_authenticated:
            return login_manager.unauthorized()

        lifetime = timedelta(minutes=current_app.config.get('SESSION_LIFETIME_MINUTES', 480))
        ctx = SessionContext(current_user.id, current_user.email, started_at=_signed_in_at(), lifetime=lifetime)
        ctx.subscribe(_forget_context)
        if ctx.is_expired():
            ctx.end('expired')
            logout_user()
            return login_manager.unauthorized()

        g._okfees_session_context = ctx
        return view(ctx, *args, **kwargs)
    return wrapped


def _record_sign_in(sender, user=None, **extra):
    flask_session[SIGNED_IN_AT_KEY] = datetime.utcnow().isoformat()


def _end_current_context(sender, user=None, **extra):
    flask_session.pop(SIGNED_IN_AT_KEY, None)
    ctx = current_context()
    if ctx is not None:
        ctx.end('signed_out')


def init_app(app):
    user_logged_in.connect(_record_sign_in, app)
    user_logged_out.connect(_end_current_context, app)

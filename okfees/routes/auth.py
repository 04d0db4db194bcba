from urllib.parse import urlsplit
from flask import Blueprint, current_app, request, url_for
from flask_login import login_user, logout_user
from okfees import db
from okfees.models.user import User, MAX_LOGIN_ATTEMPTS, LOCK_MINUTES
from okfees.models.profile import Profile
from okfees.routes.main import log_activity, request_data, success_response, error_response
from okfees.session import session_guard
from okfees.utils.password_validator import PasswordValidator

bp = Blueprint('auth', __name__, url_prefix='/auth')

def safe_next(target):
    """Only same-site paths are followed after login"""
    if not target or not target.startswith('/') or target.startswith('//') or '\\' in target:
        return None
    parts = urlsplit(target)
    if parts.scheme or parts.netloc:
        return None
    return target

@bp.route('/register', methods=['POST'])
def register():
    data = request_data()
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''
    confirm = data.get('confirm_password', password)

    if not email:
        return error_response('Email address is required', 400, 'Registration failed')

    validator = PasswordValidator(current_app.config.get('PASSWORD_MIN_LENGTH', 6))
    is_valid, issues = validator.validate_password(password, confirm)
    if not is_valid:
        return error_response(issues[0], 400, 'Registration failed')

    if User.query.filter_by(email=email).first():
        return error_response('An account with that email already exists', 409, 'Registration failed')

    try:
        user = User(email=email)
        user.set_password(password)
        user.profile = Profile(
            email=email,
            full_name=data.get('full_name'),
            institute_name=data.get('institute_name'),
            phone=data.get('phone'),
        )
        db.session.add(user)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error registering {email}: {str(e)}")
        return error_response('Failed to create account', 500, 'Registration failed')

    log_activity(user.id, 'register', f'Account created: {email}', request.remote_addr)
    return success_response('Account created successfully', 201, user=user.to_dict())

@bp.route('/login', methods=['GET', 'POST'])
def login():
    if request.method == 'GET':
        return error_response('Please log in to access this page.', 401, 'Login required')

    data = request_data()
    email = (data.get('email') or '').strip().lower()
    password = data.get('password')
    user = User.query.filter_by(email=email).first()

    if not user:
        current_app.logger.warning(f'Login attempt with unknown email: {email}')
        return error_response('Invalid email or password', 401, 'Login failed')

    if user.is_account_locked():
        minutes_remaining = user.get_lock_time_remaining()
        log_activity(user.id, 'login_attempt', f'Account locked, login attempt blocked for user {email}', request.remote_addr)
        return error_response(f'Account is locked. Please try again in {minutes_remaining} minutes.', 423, 'Account locked')

    if user.check_password(password):
        login_user(user)
        log_activity(user.id, 'login', f'User logged in successfully: {email}', request.remote_addr)
        next_page = safe_next(request.args.get('next'))
        return success_response('Logged in successfully', user=user.to_dict(),
                                redirect=next_page or url_for('dashboard.overview'))

    attempts_remaining = MAX_LOGIN_ATTEMPTS - user.login_attempts
    if attempts_remaining > 0:
        log_activity(user.id, 'login_failed', f'Invalid password attempt for user {email}', request.remote_addr)
        return error_response(f'Invalid email or password. {attempts_remaining} attempts remaining.', 401, 'Login failed')

    log_activity(user.id, 'account_locked', f'Account locked due to too many failed login attempts for user {email}', request.remote_addr)
    return error_response(f'Account has been locked for {LOCK_MINUTES} minutes due to too many failed attempts.', 423, 'Account locked')

@bp.route('/logout', methods=['POST'])
@session_guard
def logout(ctx):
    log_activity(ctx.principal_id, 'logout', f'User logged out: {ctx.email}', request.remote_addr)
    logout_user()
    return success_response('You have been logged out.', redirect=url_for('auth.login'))

@bp.route('/me')
@session_guard
def me(ctx):
    user = db.session.get(User, ctx.principal_id)
    return success_response('Signed in', user=user.to_dict(), session_active=ctx.is_active)

from flask import Blueprint, current_app, request, session, url_for
from okfees.models.user import User
from okfees.routes.main import log_activity, request_data, success_response, error_response
from okfees.services.password_recovery_service import PasswordRecoveryFlow, RecoveryStep

bp = Blueprint('password_recovery', __name__, url_prefix='/password-recovery')

FLOW_KEY = 'password_recovery'

def load_flow():
    return PasswordRecoveryFlow.from_dict(
        session.get(FLOW_KEY),
        min_length=current_app.config.get('PASSWORD_MIN_LENGTH', 6),
    )

def store_flow(flow):
    session[FLOW_KEY] = flow.to_dict()

def _log_for_email(email, activity_type, description):
    user = User.query.filter_by(email=(email or '').strip().lower()).first()
    if user:
        log_activity(user.id, activity_type, description, request.remote_addr)

@bp.route('/state')
def state():
    flow = load_flow()
    return success_response('Recovery state', **flow.to_dict())

@bp.route('/request', methods=['POST'])
def request_code():
    """Step one: send a one-time code to the email"""
    flow = load_flow()
    if flow.step == RecoveryStep.DONE:
        flow.restart()

    email = (request_data().get('email') or '').strip()
    ok, message = flow.submit_email(email)
    store_flow(flow)
    if not ok:
        # Rejected locally unless the service itself failed
        status = 500 if email and flow.step == RecoveryStep.AWAITING_EMAIL else 400
        return error_response(message, status, 'Password recovery')

    current_app.logger.info(f'Recovery code requested for {flow.email}')
    _log_for_email(flow.email, 'recovery_requested', 'Password recovery code requested')
    return success_response(message, title='Check your email', **flow.to_dict())

@bp.route('/verify', methods=['POST'])
def verify():
    """Step two: check the code and set the new password"""
    flow = load_flow()
    data = request_data()
    email = flow.email
    ok, message = flow.submit_code(data.get('code'), data.get('new_password'), data.get('confirm_password'))
    store_flow(flow)
    if not ok:
        return error_response(message, 400, 'Password recovery')

    _log_for_email(email, 'password_reset', 'Password reset with a one-time code')
    return success_response(message, title='Password updated', step=flow.step.value,
                            redirect=url_for('auth.login'))

@bp.route('/restart', methods=['POST'])
def restart():
    """Use a different email"""
    flow = load_flow()
    flow.restart()
    store_flow(flow)
    return success_response('Enter your email to get a new code', **flow.to_dict())

from flask import Blueprint, current_app, jsonify, request
from okfees import db
from okfees.models.user_activity import UserActivity
from okfees.repositories import DataServiceError, LimitReached, RowNotFound
from okfees.services.form_controller import FormBusy, FormController, FormValidationError, RefetchFailed

# Errors a screen turns into a notice instead of letting them reach the global handlers
SCREEN_ERRORS = (FormValidationError, FormBusy, RowNotFound, LimitReached, DataServiceError)

def log_activity(user_id, activity_type, description, ip_address=None):
    if user_id:  # Only log if user is authenticated
        try:
            activity = UserActivity(user_id=user_id, activity_type=activity_type, description=description, ip_address=ip_address)
            db.session.add(activity)
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"Failed to record activity {activity_type}: {str(e)}")

def request_data():
    """JSON object body, or form fields for plain form posts"""
    data = request.get_json(silent=True)
    if data is None:
        return request.form.to_dict()
    # Arrays and scalars carry no fields
    return data if isinstance(data, dict) else {}

def notice(title, description, variant='default'):
    return {'title': title, 'description': description, 'variant': variant}

def success_response(message, status=200, title='Success', **payload):
    body = {'success': True, 'message': message, 'notice': notice(title, message)}
    body.update(payload)
    return jsonify(body), status

def error_response(message, status, title='Error'):
    return jsonify({
        'success': False,
        'message': message,
        'notice': notice(title, message, 'destructive'),
    }), status

def screen_error(error, operation, entity):
    """Map a repository or form failure to the notice the screen shows"""
    if isinstance(error, FormValidationError):
        return error_response(str(error), 400, 'Please check the form')
    if isinstance(error, FormBusy):
        return error_response(str(error), 409, 'Please wait')
    if isinstance(error, RowNotFound):
        return error_response(f'{entity.capitalize()} not found', 404, 'Not found')
    if isinstance(error, LimitReached):
        return error_response(str(error), 409, 'Limit reached')
    return error_response(f'Failed to {operation} {entity}', 500)

def save_form(schema, data, on_submit, on_success=None, row=None):
    """Run one create/edit dialog submit; returns (result, refetched snapshot)"""
    controller = FormController(schema, on_submit, on_success)
    if row is not None:
        controller.seed(row)
    controller.update(data)
    try:
        result = controller.submit()
    except RefetchFailed as e:
        # The row is committed; only the reload is missing
        current_app.logger.error(f"Saved {schema.name} but could not reload the list: {str(e.cause)}")
        return e.result, {'refreshed': False}
    return result, controller.refreshed

bp = Blueprint('main', __name__)

@bp.route('/')
def index():
    return jsonify({
        'name': 'OkFees',
        'description': 'Student, fee and announcement management for coaching institutes',
        'login': '/auth/login',
        'student_search': '/public/students/search',
    })

from flask import Blueprint, current_app, request
from okfees.repositories import DataServiceError, RowNotFound, find_student_publicly
from okfees.routes.main import error_response, success_response
from okfees.services.messaging import build_share_link, student_details_message

bp = Blueprint('public', __name__, url_prefix='/public')

def _lookup():
    term = (request.args.get('q') or '').strip()
    if not term:
        return None, error_response('Please enter a student ID or name', 400, 'Search')
    try:
        return find_student_publicly(term), None
    except RowNotFound:
        return None, error_response('No student found with that ID or name', 404, 'Not found')
    except DataServiceError:
        return None, error_response('Failed to search students', 500)

@bp.route('/students/search')
def search_student():
    """Look a student up by ID or name without signing in"""
    student, failure = _lookup()
    if failure:
        return failure
    return success_response('Student found', student=student.to_public_dict())

@bp.route('/students/search/share')
def share_student():
    student, failure = _lookup()
    if failure:
        return failure
    message = student_details_message(student.to_public_dict())
    return success_response('Opening WhatsApp',
                            url=build_share_link(message, current_app.config.get('WHATSAPP_BASE_URL', 'https://wa.me')))

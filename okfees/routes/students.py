from flask import Blueprint, current_app, request
from okfees import repositories
from okfees.forms import STUDENT_FORM
from okfees.repositories import STUDENTS, RowNotFound
from okfees.routes.main import (SCREEN_ERRORS, error_response, log_activity, request_data, save_form,
                                screen_error, success_response)
from okfees.services.list_view import ListSnapshot
from okfees.services.messaging import MessagingNotConfigured, build_whatsapp_link, student_id_message
from okfees.session import session_guard

bp = Blueprint('students', __name__, url_prefix='/api/students')

# The admin single-student search only looks at code and name
ADMIN_SEARCH_FIELDS = ('student_code', 'name')

def student_snapshot(ctx, term=None):
    """Full refetch of the owner's students, then the client-side filter"""
    rows = [s.to_dict() for s in repositories.students(ctx).list()]
    snapshot = ListSnapshot(rows, STUDENTS.search_fields)
    students = snapshot.filter(term)
    return {'students': students, 'total': len(snapshot), 'shown': len(students)}

@bp.route('')
@session_guard
def index(ctx):
    try:
        return success_response('Students loaded', **student_snapshot(ctx, request.args.get('q')))
    except SCREEN_ERRORS as e:
        return screen_error(e, 'fetch', 'students')

@bp.route('', methods=['POST'])
@session_guard
def create(ctx):
    repo = repositories.students(ctx)
    try:
        student, snapshot = save_form(STUDENT_FORM, request_data(), repo.insert,
                                      lambda _: student_snapshot(ctx))
    except SCREEN_ERRORS as e:
        return screen_error(e, 'create', 'student')

    log_activity(ctx.principal_id, 'add_student', f'Added student {student.name} ({student.student_code})', request.remote_addr)
    return success_response(f'Student added with ID {student.student_code}', 201,
                            student=student.to_dict(), **snapshot)

@bp.route('/<int:student_id>', methods=['PUT'])
@session_guard
def update(ctx, student_id):
    repo = repositories.students(ctx)
    try:
        row = repo.get(student_id)
        student, snapshot = save_form(STUDENT_FORM, request_data(), lambda values: repo.update(student_id, values),
                                      lambda _: student_snapshot(ctx), row=row)
    except SCREEN_ERRORS as e:
        return screen_error(e, 'update', 'student')

    log_activity(ctx.principal_id, 'edit_student', f'Updated student {student.name} ({student.student_code})', request.remote_addr)
    return success_response('Student updated successfully', student=student.to_dict(), **snapshot)

@bp.route('/<int:student_id>', methods=['DELETE'])
@session_guard
def delete(ctx, student_id):
    try:
        repositories.students(ctx).delete(student_id)
        snapshot = student_snapshot(ctx)
    except SCREEN_ERRORS as e:
        return screen_error(e, 'delete', 'student')

    log_activity(ctx.principal_id, 'delete_student', f'Deleted student {student_id}', request.remote_addr)
    return success_response('Student deleted successfully', **snapshot)

@bp.route('/search')
@session_guard
def search(ctx):
    term = (request.args.get('q') or '').strip()
    if not term:
        return error_response('Please enter a student ID or name', 400, 'Search')
    try:
        student = repositories.students(ctx).find_one(term, fields=ADMIN_SEARCH_FIELDS)
    except RowNotFound:
        return error_response('No student found', 404, 'Not found')
    except SCREEN_ERRORS as e:
        return screen_error(e, 'search', 'students')
    return success_response('Student found', student=student.to_dict())

@bp.route('/<int:student_id>/whatsapp', methods=['POST'])
@session_guard
def send_student_id(ctx, student_id):
    """Deep link that sends the student their ID from the institute's number"""
    try:
        student = repositories.students(ctx).get(student_id)
        profile = repositories.profiles(ctx).get_or_create()
        link = build_whatsapp_link(profile.whatsapp_number,
                                   student_id_message(student.student_code, student.name),
                                   current_app.config.get('WHATSAPP_BASE_URL', 'https://wa.me'))
    except MessagingNotConfigured as e:
        return error_response(str(e), 400, 'WhatsApp not configured')
    except SCREEN_ERRORS as e:
        return screen_error(e, 'fetch', 'student')
    return success_response('Opening WhatsApp', url=link)

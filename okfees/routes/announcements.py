from flask import Blueprint, current_app, request
from okfees import repositories
from okfees.forms import ANNOUNCEMENT_FORM
from okfees.routes.main import SCREEN_ERRORS, log_activity, request_data, save_form, screen_error, success_response
from okfees.services.list_view import distinct_batches
from okfees.session import session_guard

bp = Blueprint('announcements', __name__, url_prefix='/api/announcements')

def announcement_snapshot(ctx):
    return {'announcements': [a.to_dict() for a in repositories.announcements(ctx).list()]}

@bp.route('')
@session_guard
def index(ctx):
    try:
        return success_response('Announcements loaded', **announcement_snapshot(ctx))
    except SCREEN_ERRORS as e:
        return screen_error(e, 'fetch', 'announcements')

@bp.route('/batches')
@session_guard
def batches(ctx):
    """Batch labels to target an announcement at"""
    try:
        students = repositories.students(ctx).list()
    except SCREEN_ERRORS as e:
        return screen_error(e, 'fetch', 'batches')
    return success_response('Batches loaded', batches=distinct_batches(students))

@bp.route('', methods=['POST'])
@session_guard
def create(ctx):
    repo = repositories.announcements(ctx)
    try:
        announcement, snapshot = save_form(ANNOUNCEMENT_FORM, request_data(), repo.insert,
                                           lambda _: announcement_snapshot(ctx))
    except SCREEN_ERRORS as e:
        return screen_error(e, 'create', 'announcement')

    log_activity(ctx.principal_id, 'add_announcement', f'Posted announcement: {announcement.title}', request.remote_addr)
    return success_response('Announcement posted successfully', 201, announcement=announcement.to_dict(), **snapshot)

@bp.route('/<int:announcement_id>', methods=['PUT'])
@session_guard
def update(ctx, announcement_id):
    repo = repositories.announcements(ctx)
    try:
        row = repo.get(announcement_id)
        announcement, snapshot = save_form(ANNOUNCEMENT_FORM, request_data(),
                                           lambda values: repo.update(announcement_id, values),
                                           lambda _: announcement_snapshot(ctx), row=row)
    except SCREEN_ERRORS as e:
        return screen_error(e, 'update', 'announcement')

    log_activity(ctx.principal_id, 'edit_announcement', f'Updated announcement: {announcement.title}', request.remote_addr)
    return success_response('Announcement updated successfully', announcement=announcement.to_dict(), **snapshot)

@bp.route('/<int:announcement_id>', methods=['DELETE'])
@session_guard
def delete(ctx, announcement_id):
    try:
        repositories.announcements(ctx).delete(announcement_id)
        snapshot = announcement_snapshot(ctx)
    except SCREEN_ERRORS as e:
        return screen_error(e, 'delete', 'announcement')

    log_activity(ctx.principal_id, 'delete_announcement', f'Deleted announcement {announcement_id}', request.remote_addr)
    return success_response('Announcement deleted successfully', **snapshot)

@bp.route('/feed')
@session_guard
def feed(ctx):
    """Notification dropdown"""
    limit = current_app.config.get('ANNOUNCEMENT_FEED_LIMIT', 10)
    scope = current_app.config.get('ANNOUNCEMENT_FEED_SCOPE', 'owner')
    try:
        latest = repositories.latest_announcements(ctx, limit, scope)
    except SCREEN_ERRORS as e:
        return screen_error(e, 'fetch', 'announcements')
    return success_response('Announcements loaded',
                            announcements=[a.to_dict() for a in latest],
                            unread_count=len(latest))

@bp.route('/latest')
@session_guard
def latest(ctx):
    """Announcement bar on the dashboard"""
    limit = current_app.config.get('DASHBOARD_ANNOUNCEMENT_LIMIT', 3)
    try:
        rows = repositories.announcements(ctx).list(limit=limit)
    except SCREEN_ERRORS as e:
        return screen_error(e, 'fetch', 'announcements')
    return success_response('Announcements loaded', announcements=[a.to_dict() for a in rows])

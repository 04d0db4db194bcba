"""Blog dashboard: events, live classes, topper students and the institute page."""
from flask import Blueprint, request
from okfees import repositories
from okfees.forms import EVENT_FORM, INSTITUTE_FORM, LIVE_CLASS_FORM, SUMMARY_FORM, TOPPER_FORM
from okfees.routes.main import SCREEN_ERRORS, log_activity, request_data, save_form, screen_error, success_response
from okfees.session import session_guard

bp = Blueprint('blog', __name__, url_prefix='/api/blog')

def collection_snapshot(repo, key):
    rows = repo.list()
    snapshot = {key: [row.to_dict() for row in rows]}
    if repo.limit is not None:
        snapshot['limit'] = repo.limit
        snapshot['can_create'] = len(rows) < repo.limit
    return snapshot

def register_collection(path, key, factory, schema, label):
    """List/create/update/delete routes for one blog collection"""

    def index(ctx):
        repo = factory(ctx)
        try:
            return success_response(f'{repo.spec.entity.capitalize()} loaded', **collection_snapshot(repo, key))
        except SCREEN_ERRORS as e:
            return screen_error(e, 'fetch', repo.spec.entity)

    def create(ctx):
        repo = factory(ctx)
        try:
            row, snapshot = save_form(schema, request_data(), repo.insert,
                                      lambda _: collection_snapshot(repo, key))
        except SCREEN_ERRORS as e:
            return screen_error(e, 'create', label)
        log_activity(ctx.principal_id, f'add_{key}', f'Added {label} {row.id}', request.remote_addr)
        return success_response(f'{label.capitalize()} added successfully', 201, item=row.to_dict(), **snapshot)

    def update(ctx, row_id):
        repo = factory(ctx)
        try:
            current = repo.get(row_id)
            row, snapshot = save_form(schema, request_data(), lambda values: repo.update(row_id, values),
                                      lambda _: collection_snapshot(repo, key), row=current)
        except SCREEN_ERRORS as e:
            return screen_error(e, 'update', label)
        log_activity(ctx.principal_id, f'edit_{key}', f'Updated {label} {row_id}', request.remote_addr)
        return success_response(f'{label.capitalize()} updated successfully', item=row.to_dict(), **snapshot)

    def delete(ctx, row_id):
        repo = factory(ctx)
        try:
            repo.delete(row_id)
            snapshot = collection_snapshot(repo, key)
        except SCREEN_ERRORS as e:
            return screen_error(e, 'delete', label)
        log_activity(ctx.principal_id, f'delete_{key}', f'Deleted {label} {row_id}', request.remote_addr)
        return success_response(f'{label.capitalize()} deleted successfully', **snapshot)

    bp.add_url_rule(f'/{path}', f'{key}_index', session_guard(index))
    bp.add_url_rule(f'/{path}', f'{key}_create', session_guard(create), methods=['POST'])
    bp.add_url_rule(f'/{path}/<int:row_id>', f'{key}_update', session_guard(update), methods=['PUT'])
    bp.add_url_rule(f'/{path}/<int:row_id>', f'{key}_delete', session_guard(delete), methods=['DELETE'])

register_collection('events', 'events', repositories.events, EVENT_FORM, 'event')
register_collection('live-classes', 'live_classes', repositories.live_classes, LIVE_CLASS_FORM, 'live class')
register_collection('toppers', 'toppers', repositories.topper_students, TOPPER_FORM, 'topper student')

@bp.route('/institute')
@session_guard
def institute(ctx):
    try:
        row = repositories.institute_info(ctx).get_or_create()
    except SCREEN_ERRORS as e:
        return screen_error(e, 'fetch', 'institute information')
    return success_response('Institute information loaded', institute=row.to_dict())

@bp.route('/institute', methods=['PUT'])
@session_guard
def save_institute(ctx):
    repo = repositories.institute_info(ctx)
    try:
        current = repo.get_or_create()
        row, _ = save_form(INSTITUTE_FORM, request_data(), repo.save, row=current)
    except SCREEN_ERRORS as e:
        return screen_error(e, 'save', 'institute information')
    log_activity(ctx.principal_id, 'edit_institute', 'Updated institute information', request.remote_addr)
    return success_response('Institute information saved', institute=row.to_dict())

@bp.route('/summary')
@session_guard
def summary(ctx):
    try:
        row = repositories.student_summary(ctx).get_or_create()
    except SCREEN_ERRORS as e:
        return screen_error(e, 'fetch', 'student summary')
    return success_response('Student summary loaded', summary=row.to_dict())

@bp.route('/summary', methods=['PUT'])
@session_guard
def save_summary(ctx):
    repo = repositories.student_summary(ctx)
    try:
        current = repo.get_or_create()
        row, _ = save_form(SUMMARY_FORM, request_data(), repo.save, row=current)
    except SCREEN_ERRORS as e:
        return screen_error(e, 'save', 'student summary')
    log_activity(ctx.principal_id, 'edit_summary', 'Updated student summary', request.remote_addr)
    return success_response('Student summary saved', summary=row.to_dict())

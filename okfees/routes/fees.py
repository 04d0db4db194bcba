from datetime import date
from flask import Blueprint, current_app, request
from okfees import repositories
from okfees.forms import FEE_PAYMENT_FORM
from okfees.routes.main import SCREEN_ERRORS, error_response, log_activity, request_data, save_form, screen_error, success_response
from okfees.repositories import RowNotFound
from okfees.services.list_view import ListSnapshot, payment_summary, pending_payments
from okfees.session import session_guard

bp = Blueprint('fees', __name__, url_prefix='/api/fees')

PAYMENT_SEARCH_FIELDS = ('student_name', 'student_code')

def missing_row(error, operation):
    # The payment itself, or the student it points at, is missing or belongs to someone else
    if error.entity == 'students':
        return error_response('Student not found', 404, 'Not found')
    return screen_error(error, operation, 'payment')

def payment_snapshot(ctx, term=None):
    rows = [p.to_dict() for p in repositories.fee_payments(ctx).list()]
    snapshot = ListSnapshot(rows, PAYMENT_SEARCH_FIELDS)
    payments = snapshot.filter(term)
    return {
        'payments': payments,
        'summary': payment_summary(snapshot, date.today()),
    }

@bp.route('')
@session_guard
def index(ctx):
    try:
        return success_response('Payments loaded', **payment_snapshot(ctx, request.args.get('q')))
    except SCREEN_ERRORS as e:
        return screen_error(e, 'fetch', 'fee payments')

@bp.route('/students')
@session_guard
def student_options(ctx):
    """Students to pick from when recording a payment"""
    try:
        students = repositories.students(ctx).list()
    except SCREEN_ERRORS as e:
        return screen_error(e, 'fetch', 'students')
    options = ListSnapshot(students).sorted_by(lambda s: (s.name or '').lower())
    return success_response('Students loaded', students=[
        {'id': s.id, 'name': s.name, 'student_code': s.student_code} for s in options
    ])

@bp.route('', methods=['POST'])
@session_guard
def create(ctx):
    repo = repositories.fee_payments(ctx)
    try:
        payment, snapshot = save_form(FEE_PAYMENT_FORM, request_data(), repo.insert,
                                      lambda _: payment_snapshot(ctx))
    except RowNotFound as e:
        return missing_row(e, 'record')
    except SCREEN_ERRORS as e:
        return screen_error(e, 'record', 'payment')

    log_activity(ctx.principal_id, 'record_payment',
                 f'Recorded payment of {payment.amount_paid} for student {payment.student_id} ({payment.month}/{payment.year})',
                 request.remote_addr)
    return success_response('Payment recorded successfully', 201, payment=payment.to_dict(), **snapshot)

@bp.route('/<int:payment_id>', methods=['PUT'])
@session_guard
def update(ctx, payment_id):
    repo = repositories.fee_payments(ctx)
    try:
        row = repo.get(payment_id)
        payment, snapshot = save_form(FEE_PAYMENT_FORM, request_data(), lambda values: repo.update(payment_id, values),
                                      lambda _: payment_snapshot(ctx), row=row)
    except RowNotFound as e:
        return missing_row(e, 'update')
    except SCREEN_ERRORS as e:
        return screen_error(e, 'update', 'payment')

    log_activity(ctx.principal_id, 'edit_payment', f'Updated payment {payment_id}', request.remote_addr)
    return success_response('Payment updated successfully', payment=payment.to_dict(), **snapshot)

@bp.route('/<int:payment_id>', methods=['DELETE'])
@session_guard
def delete(ctx, payment_id):
    try:
        repositories.fee_payments(ctx).delete(payment_id)
        snapshot = payment_snapshot(ctx)
    except SCREEN_ERRORS as e:
        return screen_error(e, 'delete', 'payment')

    log_activity(ctx.principal_id, 'delete_payment', f'Deleted payment {payment_id}', request.remote_addr)
    return success_response('Payment deleted successfully', **snapshot)

@bp.route('/pending')
@session_guard
def pending(ctx):
    """Active students with the largest outstanding balance"""
    try:
        students = repositories.students(ctx).list()
    except SCREEN_ERRORS as e:
        return screen_error(e, 'fetch', 'pending payments')
    limit = current_app.config.get('PENDING_PAYMENTS_LIMIT', 10)
    return success_response('Pending payments loaded', pending=pending_payments(students, limit))

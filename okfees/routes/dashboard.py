from datetime import date
from flask import Blueprint, current_app
from okfees import repositories
from okfees.routes.main import SCREEN_ERRORS, screen_error, success_response
from okfees.services.list_view import distinct_batches, fee_balance, payment_summary
from okfees.session import session_guard

bp = Blueprint('dashboard', __name__, url_prefix='/api/dashboard')

def dashboard_stats(students, payments, today=None):
    """Headline numbers for the dashboard cards"""
    pending_dues = 0.0
    for student in students:
        pending, _ = fee_balance(student.fee_amount, student.fee_paid)
        if pending > 0:
            pending_dues += pending
    return {
        'total_students': len(students),
        'active_students': sum(1 for s in students if s.status == 'active'),
        'monthly_revenue': payment_summary(payments, today)['this_month'],
        'pending_dues': round(pending_dues, 2),
        'active_batches': len(distinct_batches(students)),
    }

@bp.route('')
@session_guard
def overview(ctx):
    limit = current_app.config.get('DASHBOARD_ANNOUNCEMENT_LIMIT', 3)
    try:
        students = repositories.students(ctx).list()
        payments = repositories.fee_payments(ctx).list()
        announcements = repositories.announcements(ctx).list(limit=limit)
    except SCREEN_ERRORS as e:
        return screen_error(e, 'fetch', 'dashboard')
    return success_response('Dashboard loaded',
                            stats=dashboard_stats(students, payments, date.today()),
                            announcements=[a.to_dict() for a in announcements])

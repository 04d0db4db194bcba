from okfees import db
from okfees.services.list_view import fee_balance
from datetime import datetime, date
from flask import current_app, has_app_context
from sqlalchemy import event, func, select

class Student(db.Model):
    __tablename__ = 'students'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    # Human-readable code handed to students, e.g. STU-0042; unique across all institutes
    student_code = db.Column(db.String(32), unique=True, nullable=False)
    code_number = db.Column(db.Integer, unique=True, nullable=False)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120))
    phone = db.Column(db.String(32))
    batch = db.Column(db.String(80))
    fee_amount = db.Column(db.Float)
    fee_paid = db.Column(db.Float, nullable=False, default=0)
    status = db.Column(db.String(20), default='active')  # free text: 'active', 'inactive', ...
    enrollment_date = db.Column(db.Date, default=date.today)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    payments = db.relationship('FeePayment', backref='student', lazy=True, cascade='all, delete-orphan')

    @property
    def pending_amount(self):
        return fee_balance(self.fee_amount, self.fee_paid)[0]

    @property
    def paid_percentage(self):
        return fee_balance(self.fee_amount, self.fee_paid)[1]

    def to_dict(self):
        return {
            'id': self.id,
            'student_code': self.student_code,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'batch': self.batch,
            'fee_amount': self.fee_amount,
            'fee_paid': self.fee_paid,
            'pending_amount': self.pending_amount,
            'paid_percentage': self.paid_percentage,
            'status': self.status,
            'enrollment_date': self.enrollment_date.isoformat() if self.enrollment_date else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def to_public_dict(self):
        """Fields shown by the unauthenticated student lookup"""
        return {
            'student_code': self.student_code,
            'name': self.name,
            'batch': self.batch,
            'status': self.status,
            'fee_amount': self.fee_amount,
            'fee_paid': self.fee_paid,
            'pending_amount': self.pending_amount,
            'enrollment_date': self.enrollment_date.isoformat() if self.enrollment_date else None,
        }

    def __repr__(self):
        return f'<Student {self.student_code} {self.name}>'

def _code_prefix():
    if has_app_context():
        return current_app.config.get('STUDENT_CODE_PREFIX', 'STU')
    return 'STU'

@event.listens_for(Student, 'before_insert')
def assign_student_code(mapper, connection, target):
    """Generate the next student code before the row is written"""
    if target.fee_paid is None:
        target.fee_paid = 0
    if target.student_code:
        return

    current = connection.execute(select(func.max(Student.code_number))).scalar() or 0
    # Several students flushed together all see the same max, so remember what was handed out
    issued = connection.info.get('okfees_last_code_number', 0)
    target.code_number = max(current, issued) + 1
    connection.info['okfees_last_code_number'] = target.code_number
    target.student_code = f"{_code_prefix()}-{target.code_number:04d}"

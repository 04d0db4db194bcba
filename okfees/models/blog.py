"""Content shown on the institute's public blog page."""
from okfees import db
from datetime import datetime

DEFAULT_INSTITUTE = {
    'name': 'My Coaching Institute',
    'location': 'Add your institute address here',
    'description': (
        'Founded with a mission to deliver quality education, our institute offers personalized '
        'guidance that nurtures the academic potential of every student. Small batch sizes and '
        'qualified teachers make sure every student receives individual attention.'
    ),
    'teacher_names': '',
    'map_link': 'https://maps.google.com',
    'hero_image_url': '',
}

DEFAULT_STUDENT_SUMMARY = (
    'Our students come from varied backgrounds but share a thirst for excellence. They participate '
    'actively in class discussions, show consistent academic growth, and perform well in board and '
    'competitive exams. With continuous support and guidance, we help them achieve their goals and '
    'prepare them for a bright academic future.'
)

def _iso(value):
    return value.isoformat() if value else None

class Event(db.Model):
    __tablename__ = 'events'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    image_url = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'image_url': self.image_url,
            'created_at': _iso(self.created_at),
        }

class LiveClass(db.Model):
    __tablename__ = 'live_classes'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    class_name = db.Column(db.String(120), nullable=False)
    subject = db.Column(db.String(120), nullable=False)
    start_date = db.Column(db.Date, nullable=False)
    timing = db.Column(db.String(80), nullable=False)
    fee = db.Column(db.Float, nullable=False, default=0)
    teacher_name = db.Column(db.String(120), nullable=False)
    teacher_image_url = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'class_name': self.class_name,
            'subject': self.subject,
            'start_date': _iso(self.start_date),
            'timing': self.timing,
            'fee': self.fee,
            'teacher_name': self.teacher_name,
            'teacher_image_url': self.teacher_image_url,
            'created_at': _iso(self.created_at),
        }

class TopperStudent(db.Model):
    __tablename__ = 'topper_students'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    class_name = db.Column(db.String(80), nullable=False)
    marks = db.Column(db.String(40), nullable=False)
    image_url = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'class_name': self.class_name,
            'marks': self.marks,
            'image_url': self.image_url,
            'created_at': _iso(self.created_at),
        }

class InstituteInfo(db.Model):
    __tablename__ = 'institute_info'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, unique=True)
    name = db.Column(db.String(160), nullable=False)
    location = db.Column(db.String(300))
    description = db.Column(db.Text)
    teacher_names = db.Column(db.String(300))
    map_link = db.Column(db.String(500))
    hero_image_url = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'location': self.location,
            'description': self.description,
            'teacher_names': self.teacher_names,
            'map_link': self.map_link,
            'hero_image_url': self.hero_image_url,
        }

class StudentSummary(db.Model):
    __tablename__ = 'student_summary'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, unique=True)
    summary = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {'id': self.id, 'summary': self.summary}

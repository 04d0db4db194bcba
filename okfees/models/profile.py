from okfees import db
from datetime import datetime

class Profile(db.Model):
    __tablename__ = 'profiles'

    # Shares its primary key with the principal it describes
    id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), primary_key=True)
    email = db.Column(db.String(120), nullable=False)
    full_name = db.Column(db.String(120))
    institute_name = db.Column(db.String(160))
    phone = db.Column(db.String(32))
    whatsapp_number = db.Column(db.String(32))
    whatsapp_group_link = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'full_name': self.full_name,
            'institute_name': self.institute_name,
            'phone': self.phone,
            'whatsapp_number': self.whatsapp_number,
            'whatsapp_group_link': self.whatsapp_group_link,
        }

    def __repr__(self):
        return f'<Profile {self.email}>'

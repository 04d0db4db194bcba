from okfees.models.announcement import MEDIA_TYPES
from okfees.services.form_controller import Field, FormSchema

STUDENT_FORM = FormSchema('student', [
    Field('name', required=True),
    Field('email'),
    Field('phone'),
    Field('batch'),
    Field('fee_amount', 'float', min_value=0),
    Field('fee_paid', 'float', min_value=0),
    Field('status'),
    Field('enrollment_date', 'date'),
])

FEE_PAYMENT_FORM = FormSchema('fee payment', [
    Field('student_id', 'int', required=True),
    Field('month', 'int', required=True, min_value=1, max_value=12),
    Field('year', 'int', required=True, min_value=2000, max_value=2100),
    Field('amount_paid', 'float', required=True, min_value=0),
    Field('payment_date', 'date'),
    Field('payment_method'),
    Field('notes', 'text'),
])

ANNOUNCEMENT_FORM = FormSchema('announcement', [
    Field('title', required=True),
    Field('content', 'text', required=True),
    Field('media_url'),
    Field('media_type', 'choice', choices=MEDIA_TYPES),
    Field('batch'),
])

EVENT_FORM = FormSchema('event', [
    Field('title', required=True),
    Field('description', 'text', required=True),
    Field('image_url'),
])

LIVE_CLASS_FORM = FormSchema('live class', [
    Field('class_name', required=True),
    Field('subject', required=True),
    Field('start_date', 'date', required=True),
    Field('timing', required=True),
    Field('fee', 'float', min_value=0),
    Field('teacher_name', required=True),
    Field('teacher_image_url'),
])

TOPPER_FORM = FormSchema('topper student', [
    Field('name', required=True),
    Field('class_name', required=True),
    Field('marks', required=True),
    Field('image_url'),
])

INSTITUTE_FORM = FormSchema('institute information', [
    Field('name', required=True),
    Field('location'),
    Field('description', 'text'),
    Field('teacher_names'),
    Field('map_link'),
    Field('hero_image_url'),
])

SUMMARY_FORM = FormSchema('student summary', [
    Field('summary', 'text', required=True),
])

PROFILE_FORM = FormSchema('profile', [
    Field('full_name'),
    Field('institute_name'),
    Field('phone'),
])

WHATSAPP_FORM = FormSchema('whatsapp settings', [
    Field('whatsapp_number'),
    Field('whatsapp_group_link'),
])

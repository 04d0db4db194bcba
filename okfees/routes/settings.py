from flask import Blueprint, current_app, request
from okfees import repositories
from okfees.forms import PROFILE_FORM, WHATSAPP_FORM
from okfees.routes.main import (SCREEN_ERRORS, error_response, log_activity, request_data, save_form,
                                screen_error, success_response)
from okfees.services.messaging import MessagingNotConfigured, build_whatsapp_link, student_id_message
from okfees.session import session_guard

bp = Blueprint('settings', __name__, url_prefix='/api/settings')

def whatsapp_settings(profile):
    return {
        'whatsapp_number': profile.whatsapp_number,
        'whatsapp_group_link': profile.whatsapp_group_link,
    }

@bp.route('/profile')
@session_guard
def profile(ctx):
    try:
        row = repositories.profiles(ctx).get_or_create()
    except SCREEN_ERRORS as e:
        return screen_error(e, 'fetch', 'profile')
    return success_response('Profile loaded', profile=row.to_dict())

@bp.route('/profile', methods=['PUT'])
@session_guard
def save_profile(ctx):
    repo = repositories.profiles(ctx)
    try:
        current = repo.get_or_create()
        row, _ = save_form(PROFILE_FORM, request_data(),
                           lambda values: repo.save(values, only=tuple(PROFILE_FORM.field_names)), row=current)
    except SCREEN_ERRORS as e:
        return screen_error(e, 'update', 'profile')
    log_activity(ctx.principal_id, 'edit_profile', 'Updated profile', request.remote_addr)
    return success_response('Profile updated successfully', profile=row.to_dict())

@bp.route('/whatsapp')
@session_guard
def whatsapp(ctx):
    try:
        row = repositories.profiles(ctx).get_or_create()
    except SCREEN_ERRORS as e:
        return screen_error(e, 'fetch', 'WhatsApp settings')
    return success_response('WhatsApp settings loaded', **whatsapp_settings(row))

@bp.route('/whatsapp', methods=['PUT'])
@session_guard
def save_whatsapp(ctx):
    repo = repositories.profiles(ctx)
    try:
        current = repo.get_or_create()
        row, _ = save_form(WHATSAPP_FORM, request_data(),
                           lambda values: repo.save(values, only=tuple(WHATSAPP_FORM.field_names)), row=current)
    except SCREEN_ERRORS as e:
        return screen_error(e, 'update', 'WhatsApp settings')
    log_activity(ctx.principal_id, 'edit_whatsapp', 'Updated WhatsApp settings', request.remote_addr)
    return success_response('WhatsApp settings saved successfully', **whatsapp_settings(row))

@bp.route('/whatsapp/student-id', methods=['POST'])
@session_guard
def send_student_id(ctx):
    data = request_data()
    student_code = (data.get('student_code') or '').strip()
    student_name = (data.get('student_name') or '').strip()
    if not student_code or not student_name:
        return error_response('Please enter both student ID and name', 400, 'Missing details')
    try:
        profile = repositories.profiles(ctx).get_or_create()
        link = build_whatsapp_link(profile.whatsapp_number, student_id_message(student_code, student_name),
                                   current_app.config.get('WHATSAPP_BASE_URL', 'https://wa.me'))
    except MessagingNotConfigured as e:
        return error_response(str(e), 400, 'WhatsApp not configured')
    except SCREEN_ERRORS as e:
        return screen_error(e, 'fetch', 'WhatsApp settings')
    return success_response('Opening WhatsApp', url=link)

"""WhatsApp deep links. Nothing here sends anything; the browser opens the URL."""
import re
from urllib.parse import quote

DEFAULT_BASE_URL = 'https://wa.me'


class MessagingNotConfigured(Exception):
    def __init__(self, message='Please configure your WhatsApp number first'):
        super().__init__(message)


def digits_only(number):
    return re.sub(r'[^0-9]', '', number or '')


def build_whatsapp_link(number, message, base_url=DEFAULT_BASE_URL):
    """Link that opens a chat with ``number`` pre-filled with ``message``."""
    digits = digits_only(number)
    if not digits:
        raise MessagingNotConfigured()
    return f"{base_url.rstrip('/')}/{digits}?text={quote(message, safe='')}"


def build_share_link(message, base_url=DEFAULT_BASE_URL):
    """Link that lets the user pick the recipient."""
    return f"{base_url.rstrip('/')}/?text={quote(message, safe='')}"


def student_id_message(student_code, student_name):
    return (
        f"Hello! Your unique student ID is: {student_code}\n\n"
        f"Student Name: {student_name}\n\n"
        "Please keep this ID safe for future reference."
    )


def student_details_message(student):
    return (
        "Student Details:\n"
        f"ID: {student.get('student_code')}\n"
        f"Name: {student.get('name')}\n"
        f"Batch: {student.get('batch') or 'N/A'}\n"
        f"Status: {student.get('status') or 'N/A'}"
    )

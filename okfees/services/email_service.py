from flask import current_app
from flask_mail import Message

from okfees import mail

class EmailService:
    """Service for handling outgoing email"""

    @staticmethod
    def send_email(subject, recipients, text_body, html_body=None):
        """
        Send an email.

        Returns True on success, False on failure.
        """
        try:
            recipient_list = list(recipients or [])
            if not recipient_list:
                current_app.logger.error("No recipients specified for email")
                return False

            current_app.logger.info(f"Preparing to send email to: {', '.join(recipient_list)}")
            current_app.logger.info(f"Subject: {subject}")

            msg = Message(
                subject=subject,
                recipients=recipient_list,
                body=text_body,
                html=html_body
            )

            mail.send(msg)
            current_app.logger.info(f"Email sent successfully to {', '.join(recipient_list)}")
            return True

        except Exception as e:
            safe_to = recipients[0] if recipients else 'unknown'
            current_app.logger.error(f"Failed to send email to {safe_to}: {str(e)}")
            return False

    @staticmethod
    def send_recovery_code(user_email, code, ttl_minutes):
        """
        Send a one-time password recovery code

        Args:
            user_email (str): Recipient address
            code (str): The one-time code
            ttl_minutes (int): Minutes until the code expires

        Returns:
            bool: True if email sent successfully, False otherwise
        """
        subject = "Your OkFees verification code"

        text_body = f"""
Hello,

Use this code to reset your OkFees password:

Verification code: {code}

The code expires in {ttl_minutes} minutes and can be used once.

If you did not ask to reset your password, you can ignore this email.

Best regards,
OkFees Team
        """

        html_body = f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>Your verification code</title>
    <style>
        body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
        .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
        .code-box {{
            background-color: #e9ecef;
            border: 2px solid #007bff;
            padding: 15px;
            border-radius: 5px;
            margin: 15px 0;
            text-align: center;
            font-family: monospace;
            font-size: 22px;
            font-weight: bold;
            letter-spacing: 4px;
        }}
        .footer {{ padding: 20px; text-align: center; font-size: 12px; color: #666; }}
    </style>
</head>
<body>
    <div class="container">
        <p>Use this code to reset your OkFees password:</p>
        <div class="code-box">{code}</div>
        <p>The code expires in {ttl_minutes} minutes and can be used once.</p>
        <p>If you did not ask to reset your password, you can ignore this email.</p>
        <div class="footer"><p>&copy; OkFees Team</p></div>
    </div>
</body>
</html>
        """

        return EmailService.send_email(
            subject=subject,
            recipients=[user_email],
            text_body=text_body,
            html_body=html_body
        )

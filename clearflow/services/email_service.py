"""
Email service for sending status notifications
"""

import smtplib
import ssl
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from email.utils import formataddr
from flask import current_app
from clearflow.templates.email_templates import get_status_email_template
from clearflow.utils.exceptions import EmailError


class EmailService:
    """Email service class"""

    @staticmethod
    def send_status_email(to_email: str, full_name: str, headline: str, message: str,
                          application_id: str, status: str) -> bool:
        """
        Send an application status email

        Args:
            to_email: Recipient email
            full_name: Recipient full name
            headline: One-line summary shown above the status badge
            message: Body text
            application_id: Application the email is about
            status: Status value driving the badge colour

        Returns:
            True if sent successfully
        """
        try:
            html_content = get_status_email_template(full_name, headline, message, application_id, status)
            return EmailService._send_email_html(to_email, f"Certificate application: {headline}", html_content)
        except EmailError:
            raise
        except Exception as e:
            raise EmailError(f"Failed to send status email: {str(e)}")

    @staticmethod
    def _send_email_html(to_email: str, subject: str, html_content: str) -> bool:
        """Send HTML email over SMTP using the app's MAIL_* settings"""
        try:
            mail_server = current_app.config.get('MAIL_SERVER', 'smtp.gmail.com')
            mail_port = current_app.config.get('MAIL_PORT', 587)
            mail_username = current_app.config.get('MAIL_USERNAME')
            mail_password = current_app.config.get('MAIL_PASSWORD')

            if not all([mail_username, mail_password]):
                raise EmailError("Email configuration not found")

            # Create message
            msg = MIMEMultipart('alternative')
            msg['Subject'] = subject
            msg['From'] = formataddr(("Certificate Clearance", mail_username))
            msg['To'] = to_email

            # Add HTML content
            msg.attach(MIMEText(html_content, 'html'))

            # Send email
            context = ssl.create_default_context()
            with smtplib.SMTP(mail_server, mail_port) as server:
                if current_app.config.get('MAIL_USE_TLS', True):
                    server.starttls(context=context)
                server.login(mail_username, mail_password)
                server.send_message(msg)

            return True

        except EmailError:
            raise
        except Exception as e:
            raise EmailError(f"Failed to send email: {str(e)}")

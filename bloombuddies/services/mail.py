import base64

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Attachment, Disposition, FileContent, FileName, FileType, Mail
from flask import current_app

from ..errors import MailNotConfigured


def send_email(to_email, subject, html, text=None, attachments=None):
    """Send one message through SendGrid.

    ``attachments`` is a list of ``(filename, mimetype, bytes)`` tuples.
    Returns ``(status_code, message_id)``.
    """
    api_key = current_app.config.get('SENDGRID_API_KEY')
    if not api_key:
        raise MailNotConfigured('SENDGRID_API_KEY is not set')
    sg = SendGridAPIClient(api_key=api_key)
    message = Mail(from_email=(current_app.config['MAIL_FROM'], current_app.config['MAIL_FROM_NAME']),
                   to_emails=to_email,
                   subject=subject,
                   html_content=html,
                   plain_text_content=text)
    for filename, mimetype, data in attachments or ():
        message.add_attachment(Attachment(
            FileContent(base64.b64encode(data).decode('ascii')),
            FileName(filename),
            FileType(mimetype),
            Disposition('attachment'),
        ))
    resp = sg.send(message)
    headers = getattr(resp, 'headers', None) or {}
    return resp.status_code, headers.get('X-Message-Id')

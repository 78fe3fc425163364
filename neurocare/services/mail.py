import base64
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, Attachment, FileContent, FileName, FileType, Disposition
from flask import current_app

def send_mail(to_email, subject, html, cc=None, attachments=None):
    """Send one transactional mail; returns (status_code, provider_message_id).

    attachments: iterable of (filename, bytes, mimetype).
    Without SENDGRID_API_KEY the message is only logged and (None, None) is returned.
    """
    api_key = current_app.config.get('SENDGRID_API_KEY')
    if not api_key:
        current_app.logger.info('SENDGRID_API_KEY not set, mail not sent: to=%s subject=%s', to_email, subject)
        return None, None
    sg = SendGridAPIClient(api_key=api_key)
    message = Mail(from_email=(current_app.config['MAIL_FROM'], current_app.config['MAIL_FROM_NAME']),
                   to_emails=to_email,
                   subject=subject,
                   html_content=html)
    if cc and cc != to_email:
        message.add_cc(cc)
    for filename, data, mimetype in attachments or ():
        message.add_attachment(Attachment(
            FileContent(base64.b64encode(data).decode('ascii')),
            FileName(filename),
            FileType(mimetype),
            Disposition('attachment'),
        ))
    resp = sg.send(message)
    headers = getattr(resp, 'headers', None) or {}
    return resp.status_code, headers.get('X-Message-Id')

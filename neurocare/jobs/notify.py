"""Outbound mail jobs.

Run on the RQ worker (inside the app context, see scripts/run_rq_worker.py)
or inline when Redis is not configured. Every mail handed to the
mailer is logged in ``notifications``, including when sending is disabled.
"""
from datetime import datetime

from flask import current_app, render_template

from ..extensions import db
from ..models.educator import EducatorProfile
from ..models.diploma_history import DiplomaVerificationHistory
from ..models.enums import DocumentType
from ..models.notification import Notification
from ..models.video_interview import VideoInterview
from ..services import dreets
from ..services.ics import build_interview_ics
from ..services.mail import send_mail


def _log_notification(educator_id, kind, to_email, subject, message_id):
    n = Notification(educator_id=educator_id, type=kind, sent_to=to_email, subject=subject,
                     provider_message_id=message_id, sent_at=datetime.utcnow())
    db.session.add(n)
    db.session.commit()
    return n.id


def _educator(educator_id):
    educator = db.session.get(EducatorProfile, educator_id)
    if educator is None:
        current_app.logger.warning('notify: educator %s no longer exists', educator_id)
    return educator


def _send_to_educator(educator, kind, subject, template, attachments=None, **context):
    to_email = educator.user.email
    html = render_template(template, educator=educator,
                           app_url=current_app.config.get('APP_URL'), **context)
    _, message_id = send_mail(to_email, subject, html, attachments=attachments)
    return _log_notification(educator.id, kind, to_email, subject, message_id)


def send_regulator_request(educator_id, diploma_url):
    """Send the DREETS verification request and record the dispatch.

    ``dreets_verification_sent_at`` is only set when the mail went out.
    """
    educator = _educator(educator_id)
    if educator is None:
        return False
    result = dreets.send_verification_request(educator, diploma_url)
    if not result['success']:
        current_app.logger.warning('DREETS request for educator %s not sent: %s', educator_id, result['message'])
        return False

    educator.dreets_verification_sent_at = datetime.utcnow()
    db.session.add(DiplomaVerificationHistory(
        educator_id=educator.id,
        action='dreets_sent',
        reason=f"Envoyé à {result['sent_to']}",
        dreets_verification_sent=True,
    ))
    db.session.commit()
    _log_notification(educator.id, 'dreets_request', result['sent_to'], result['subject'],
                      result['provider_message_id'])
    return True


def notify_document_rejected(educator_id, document_type, reason):
    educator = _educator(educator_id)
    if educator is None:
        return None
    label = DocumentType(document_type).label
    return _send_to_educator(educator, 'document_rejected', f'Document refusé : {label}',
                             'emails/document_rejected.html', document_label=label, reason=reason)


def notify_interview_scheduled(educator_id, interview_id):
    educator = _educator(educator_id)
    interview = db.session.get(VideoInterview, interview_id)
    if educator is None or interview is None or interview.scheduled_at is None:
        return None
    ics = build_interview_ics(current_app.config['UID_DOMAIN'], interview, educator.admin_notes,
                              tz=current_app.config['INTERVIEW_TIMEZONE'])
    return _send_to_educator(
        educator, 'interview_scheduled', 'Votre entretien de vérification NeuroCare',
        'emails/interview_scheduled.html',
        attachments=[(f'entretien_{interview.id}.ics', ics.encode('utf-8'), 'text/calendar')],
        scheduled_at=interview.scheduled_at, notes=educator.admin_notes,
    )


def notify_educator_verified(educator_id):
    educator = _educator(educator_id)
    if educator is None:
        return None
    return _send_to_educator(educator, 'educator_verified', 'Votre profil NeuroCare est vérifié',
                             'emails/educator_verified.html')


def notify_educator_rejected(educator_id, reason):
    educator = _educator(educator_id)
    if educator is None:
        return None
    return _send_to_educator(educator, 'educator_rejected', 'Vérification de votre profil NeuroCare',
                             'emails/educator_rejected.html', reason=reason)


def notify_diploma_reviewed(educator_id, verified, reason=None):
    educator = _educator(educator_id)
    if educator is None:
        return None
    subject = 'Votre diplôme a été vérifié' if verified else "Votre diplôme n'a pas pu être vérifié"
    return _send_to_educator(educator, 'diploma_verified' if verified else 'diploma_rejected', subject,
                             'emails/diploma_reviewed.html', verified=verified, reason=reason)

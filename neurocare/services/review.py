"""Admin review actions on documents and educators.

Each action commits its own decision in one transaction. Document decisions
then trigger a status recompute; a criminal record rejection instead moves
the educator straight to the terminal ``rejected_criminal_record`` in the
same transaction as the rejection itself. Mails are enqueued after commit.
"""
from datetime import datetime

from flask import current_app
from sqlalchemy import func

from ..extensions import db, rq
from ..models.criminal_record_verification import CriminalRecordVerification
from ..models.educator import EducatorProfile
from ..models.enums import DocumentStatus, DocumentType, InterviewStatus, VerificationStatus
from ..models.verification_document import VerificationDocument
from ..models.video_interview import VideoInterview
from ..jobs import notify
from .documents import recompute_after_write, get_document
from .errors import ValidationError
from .verification import load_educator, reject_for_criminal_record, transition

S = VerificationStatus

PENDING_REVIEW_STATUSES = (
    S.DOCUMENTS_SUBMITTED.value,
    S.DOCUMENTS_VERIFIED.value,
    S.INTERVIEW_SCHEDULED.value,
)


def _require_reason(reason):
    reason = (reason or '').strip()
    if not reason:
        raise ValidationError("A rejection reason is required")
    return reason


def _parse_datetime(value):
    if isinstance(value, datetime):
        return value
    value = (value or '').strip() if isinstance(value, str) else value
    if not value:
        raise ValidationError("An interview date is required")
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date: {value}", details={"value": str(value)})


def _commit():
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def approve_document(document_id):
    """Approve one document and recompute the owner's status.

    Approving an already approved document changes nothing.
    """
    doc = get_document(document_id, lock=True)
    if doc.status == DocumentStatus.APPROVED.value:
        current_app.logger.info('document %s already approved', document_id)
    else:
        doc.status = DocumentStatus.APPROVED.value
        doc.verified_at = datetime.utcnow()
        doc.rejection_reason = None
        if doc.document_type == DocumentType.CRIMINAL_RECORD.value:
            db.session.add(CriminalRecordVerification(
                educator_id=doc.educator_id, is_clean=True, notes='Casier vierge - Approuvé'))
        _commit()
        current_app.logger.info('document %s (%s) approved', document_id, doc.document_type)

    recompute_after_write(doc.educator_id, 'approve')
    return doc


def reject_document(document_id, reason):
    """Reject one document with a mandatory reason.

    A rejected criminal record ends the verification for good.
    """
    reason = _require_reason(reason)
    doc = get_document(document_id, lock=True)
    criminal = doc.document_type == DocumentType.CRIMINAL_RECORD.value

    doc.status = DocumentStatus.REJECTED.value
    doc.rejection_reason = reason
    doc.verified_at = datetime.utcnow()
    if criminal:
        educator = load_educator(doc.educator_id, lock=True)
        db.session.add(CriminalRecordVerification(
            educator_id=doc.educator_id, is_clean=False, notes=reason))
        reject_for_criminal_record(educator)
    _commit()
    current_app.logger.info('document %s (%s) rejected: %s', document_id, doc.document_type, reason)

    # sent before the recompute, which may raise RecomputeError
    rq.enqueue(notify.notify_document_rejected, doc.educator_id, doc.document_type, reason)
    if not criminal:
        recompute_after_write(doc.educator_id, 'reject')
    return doc


def pending_interview(educator_id):
    return (
        VideoInterview.query
        .filter_by(educator_id=educator_id, status=InterviewStatus.PENDING.value)
        .order_by(VideoInterview.id.desc())
        .first()
    )


def schedule_interview(educator_id, date, notes=None):
    """Schedule (or reschedule) the verification interview.

    Requires all documents approved. The single pending VideoInterview is
    created or moved to the new date, and the educator gets an invite.
    """
    when = _parse_datetime(date)
    educator = load_educator(educator_id, lock=True)
    transition(educator, S.INTERVIEW_SCHEDULED)
    educator.interview_scheduled_date = when
    if notes is not None:
        educator.admin_notes = notes

    interview = pending_interview(educator.id)
    if interview is None:
        interview = VideoInterview(educator_id=educator.id, status=InterviewStatus.PENDING.value)
        db.session.add(interview)
    interview.scheduled_at = when
    _commit()
    current_app.logger.info('interview %s for educator %s scheduled at %s', interview.id, educator.id, when)

    rq.enqueue(notify.notify_interview_scheduled, educator.id, interview.id)
    return interview


def _close_interview(educator_id, passed, reason=None):
    interview = pending_interview(educator_id)
    if interview is None:
        return None
    interview.status = (InterviewStatus.PASSED if passed else InterviewStatus.FAILED).value
    interview.overall_result = interview.status
    interview.failure_reason = reason
    interview.completed_at = datetime.utcnow()
    return interview


def approve_educator(educator_id):
    """Final approval after the interview: status, badge and visibility together."""
    educator = load_educator(educator_id, lock=True)
    transition(educator, S.VERIFIED)
    _close_interview(educator.id, passed=True)
    _commit()
    rq.enqueue(notify.notify_educator_verified, educator.id)
    return educator


def reject_educator(educator_id, reason):
    reason = _require_reason(reason)
    educator = load_educator(educator_id, lock=True)
    transition(educator, S.REJECTED_INTERVIEW)
    _close_interview(educator.id, passed=False, reason=reason)
    educator.admin_notes = reason
    _commit()
    rq.enqueue(notify.notify_educator_rejected, educator.id, reason)
    return educator


def save_admin_notes(educator_id, notes, interview_date=None):
    """Store notes (and optionally a planned date) without changing the status."""
    educator = load_educator(educator_id, lock=True)
    educator.admin_notes = notes
    if interview_date:
        educator.interview_scheduled_date = _parse_datetime(interview_date)
    _commit()
    return educator


def recompute(educator_id):
    """Retry a status recompute for one educator."""
    return recompute_after_write(educator_id, 'manual')


def list_pending_educators(status=None):
    """Educators waiting on an admin, newest first, with their document counts."""
    counts = (
        db.session.query(VerificationDocument.educator_id, func.count(VerificationDocument.id).label('n'))
        .group_by(VerificationDocument.educator_id)
        .subquery()
    )
    q = (
        db.session.query(EducatorProfile, func.coalesce(counts.c.n, 0))
        .outerjoin(counts, counts.c.educator_id == EducatorProfile.id)
    )
    if status:
        try:
            status = S(status).value
        except ValueError:
            raise ValidationError(f"Unknown status: {status}")
        q = q.filter(EducatorProfile.verification_status == status)
    else:
        q = q.filter(EducatorProfile.verification_status.in_(PENDING_REVIEW_STATUSES))
    rows = q.order_by(EducatorProfile.created_at.desc(), EducatorProfile.id.desc()).all()

    items = []
    for educator, n in rows:
        d = educator.to_dict()
        d['documents_count'] = n
        d['status_label'] = educator.status.label
        items.append(d)
    return items

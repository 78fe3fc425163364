"""Diploma submission, regulator dispatch and admin diploma review.

Diploma verification is tracked on the educator profile
(``diploma_verification_status``), next to, and independent from, the
``diploma`` verification document reviewed in the admin dashboard.
Neither the OCR pre-check nor the regulator answer ever grants the badge.
"""
import time
from datetime import datetime

from flask import current_app
from sqlalchemy import func

from ..extensions import db, rq
from ..models.diploma_history import DiplomaVerificationHistory
from ..models.educator import EducatorProfile
from ..models.enums import DiplomaStatus
from ..jobs import notify
from . import ocr, storage
from .documents import validate_upload
from .errors import ValidationError
from .professions import requires_dreets_verification
from .verification import load_educator

DIPLOMA_EXTENSIONS = {'pdf', 'jpg', 'jpeg', 'png'}
DIPLOMA_FILTERS = ('all', 'pending', 'verified', 'rejected')


def validate_diploma_file(file_storage):
    """Image or PDF, within MAX_UPLOAD_BYTES; returns the extension."""
    return validate_upload(file_storage, allowed=DIPLOMA_EXTENSIONS)


def _mimetype(file_storage, ext):
    if ext == 'pdf':
        return 'application/pdf'
    mimetype = getattr(file_storage, 'mimetype', None)
    if mimetype and mimetype.startswith('image/'):
        return mimetype
    return 'image/png' if ext == 'png' else 'image/jpeg'


def analyze(file_storage):
    """Advisory OCR of an uploaded diploma; never raises for collaborator errors."""
    ext = validate_diploma_file(file_storage)
    stream = getattr(file_storage, 'stream', file_storage)
    stream.seek(0)
    data = stream.read()
    stream.seek(0)
    result = ocr.analyze_diploma(data, file_storage.filename, _mimetype(file_storage, ext))
    result['report'] = ocr.generate_analysis_report(result)
    if result['success']:
        result['diploma_number'] = ocr.extract_diploma_number(result['text'])
        result['delivery_date'] = ocr.extract_delivery_date(result['text'])
    return result


def submit_diploma(educator, file_storage, diploma_number=None, delivery_date=None, region=None):
    """Store a new diploma, run OCR and dispatch to the regulator when required.

    Returns ``{"educator", "ocr", "dispatched"}``. OCR and regulator
    failures are logged and never fail the submission.
    """
    validate_diploma_file(file_storage)
    region = (region or '').strip() or None
    needs_dreets = requires_dreets_verification(educator.profession_type)
    if needs_dreets and not region:
        raise ValidationError("The region is required for DREETS verification", details={"field": "region"})

    result = analyze(file_storage)
    diploma_number = (diploma_number or '').strip() or None
    delivery_date = (delivery_date or '').strip() or None
    if result['success']:
        diploma_number = diploma_number or result.get('diploma_number')
        delivery_date = delivery_date or result.get('delivery_date')

    path = storage.build_path(f"educator{educator.id}", 'diploma', file_storage.filename, time.time())
    storage.upload(path, file_storage)

    previous = educator.diploma_url
    educator.diploma_url = path
    educator.diploma_verification_status = DiplomaStatus.PENDING.value
    educator.diploma_rejected_reason = None
    educator.diploma_submitted_at = datetime.utcnow()
    educator.diploma_verified_at = None
    educator.diploma_number = diploma_number
    educator.diploma_delivery_date = delivery_date
    educator.region = region
    educator.dreets_verified = False
    educator.dreets_verification_sent_at = None
    educator.dreets_response_date = None
    if result['success']:
        educator.diploma_ocr_text = result['text']
        educator.diploma_ocr_confidence = result['confidence']
        educator.diploma_ocr_analysis = result['report']
    else:
        educator.diploma_ocr_text = None
        educator.diploma_ocr_confidence = None
        educator.diploma_ocr_analysis = None
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        storage.remove(path)
        raise
    if previous and previous != path:
        storage.remove(previous)
    current_app.logger.info('educator %s submitted diploma %s (ocr=%s)', educator.id, path, result['success'])

    dispatched = False
    if needs_dreets:
        signed_url = storage.get_signed_url(path, current_app.config.get('REGULATOR_URL_TTL'))
        dispatch_to_regulator(educator, signed_url)
        dispatched = True
    return {'educator': educator, 'ocr': result, 'dispatched': dispatched}


def dispatch_to_regulator(educator, signed_url):
    """Enqueue the DREETS request; the job records the dispatch once sent."""
    return rq.enqueue(notify.send_regulator_request, educator.id, signed_url)


def _history(educator_id, action, reason=None, sent=False):
    db.session.add(DiplomaVerificationHistory(
        educator_id=educator_id, action=action, reason=reason, dreets_verification_sent=sent))


def mark_regulator_responded(educator_id):
    """Record that the regulator confirmed the diploma.

    Only the regulator fields change: the diploma review and the
    verification status are left to the admin.
    """
    educator = load_educator(educator_id, lock=True)
    educator.dreets_verified = True
    educator.dreets_response_date = datetime.utcnow()
    _history(educator.id, 'dreets_responded', sent=educator.dreets_verification_sent_at is not None)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return educator


def review_diploma(educator_id, status, reason=None):
    """Admin verdict on the submitted diploma (``verified`` or ``rejected``)."""
    try:
        status = DiplomaStatus(status)
    except ValueError:
        raise ValidationError(f"Invalid diploma status: {status}", details={"allowed": ['verified', 'rejected']})
    if status is DiplomaStatus.PENDING:
        raise ValidationError("Invalid diploma status: pending", details={"allowed": ['verified', 'rejected']})
    reason = (reason or '').strip() or None
    if status is DiplomaStatus.REJECTED and not reason:
        raise ValidationError("A rejection reason is required")

    educator = load_educator(educator_id, lock=True)
    if not educator.diploma_url:
        raise ValidationError("No diploma has been submitted", details={"educator_id": educator_id})

    now = datetime.utcnow()
    verified = status is DiplomaStatus.VERIFIED
    educator.diploma_verification_status = status.value
    educator.diploma_verified_at = now
    educator.diploma_rejected_reason = None if verified else reason
    if verified:
        educator.dreets_verified = True
        educator.dreets_response_date = educator.dreets_response_date or now
    _history(educator.id, 'approved' if verified else 'rejected', reason=reason,
             sent=educator.dreets_verification_sent_at is not None)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    current_app.logger.info('diploma of educator %s %s', educator.id, status.value)

    rq.enqueue(notify.notify_diploma_reviewed, educator.id, verified, reason)
    return educator


def list_diplomas(status_filter='pending'):
    """Submitted diplomas for the admin dashboard, most recent submission first."""
    if status_filter not in DIPLOMA_FILTERS:
        raise ValidationError(f"Invalid filter: {status_filter}", details={"allowed": list(DIPLOMA_FILTERS)})
    q = EducatorProfile.query.filter(EducatorProfile.diploma_url.isnot(None))
    if status_filter != 'all':
        q = q.filter(EducatorProfile.diploma_verification_status == status_filter)
    rows = q.order_by(EducatorProfile.diploma_submitted_at.desc()).all()
    items = []
    for educator in rows:
        d = educator.to_dict()
        d.update(educator.diploma_dict())
        d['diploma_signed_url'] = storage.get_signed_url(educator.diploma_url)
        items.append(d)
    return items


def diploma_stats():
    counts = dict(
        db.session.query(EducatorProfile.diploma_verification_status, func.count(EducatorProfile.id))
        .filter(EducatorProfile.diploma_url.isnot(None))
        .group_by(EducatorProfile.diploma_verification_status)
        .all()
    )
    stats = {s: counts.get(s, 0) for s in ('pending', 'verified', 'rejected')}
    stats['total'] = sum(counts.values())
    return stats


def diploma_history(educator_id):
    rows = (
        DiplomaVerificationHistory.query
        .filter_by(educator_id=educator_id)
        .order_by(DiplomaVerificationHistory.id.desc())
        .all()
    )
    return [{
        'action': h.action,
        'reason': h.reason,
        'dreets_verification_sent': h.dreets_verification_sent,
        'created_at': h.created_at.isoformat() if h.created_at else None,
    } for h in rows]

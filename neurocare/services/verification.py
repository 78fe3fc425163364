"""Educator verification state machine.

The educator's ``verification_status`` is derived from the four required
documents until documents are verified; from there on, explicit admin
actions drive it to one of the terminal states. ``verification_badge`` and
``profile_visible`` are never written directly: ``EducatorProfile.apply_status``
stores the projection of the status.

    pending_documents -> documents_submitted -> documents_verified
        -> interview_scheduled -> verified | rejected_interview

    any status -> rejected_criminal_record  (criminal record rejected)
"""
from datetime import datetime

from flask import current_app

from ..extensions import db
from ..models.educator import EducatorProfile
from ..models.enums import (
    VerificationStatus,
    DocumentType,
    DocumentStatus,
    TERMINAL_STATUSES,
    project,
)
from ..models.verification_document import VerificationDocument
from .errors import ConsistencyError, NotFoundError, TransitionError

S = VerificationStatus

REQUIRED_DOCUMENT_TYPES = tuple(t.value for t in DocumentType)

# explicit admin transitions; document-driven moves go through derive_status
ALLOWED_TRANSITIONS = {
    S.PENDING_DOCUMENTS: {S.DOCUMENTS_SUBMITTED},
    S.DOCUMENTS_SUBMITTED: {S.PENDING_DOCUMENTS, S.DOCUMENTS_VERIFIED},
    S.DOCUMENTS_VERIFIED: {S.PENDING_DOCUMENTS, S.DOCUMENTS_SUBMITTED, S.INTERVIEW_SCHEDULED},
    S.INTERVIEW_SCHEDULED: {
        S.PENDING_DOCUMENTS,
        S.DOCUMENTS_SUBMITTED,
        S.INTERVIEW_SCHEDULED,
        S.VERIFIED,
        S.REJECTED_INTERVIEW,
    },
    S.VERIFIED: set(),
    S.REJECTED_CRIMINAL_RECORD: set(),
    S.REJECTED_INTERVIEW: set(),
}


def can_transition(current, target):
    current, target = S(current), S(target)
    if target is S.REJECTED_CRIMINAL_RECORD:
        return True
    return target in ALLOWED_TRANSITIONS[current]


def latest_per_type(documents):
    """Return ({type: latest document}, {type: row count}) for the required types.

    Rows of unknown types are ignored. The latest row is the one with the
    most recent ``uploaded_at`` (ties broken by id).
    """
    latest = {}
    counts = {}
    for doc in documents:
        dtype = doc.document_type
        if dtype not in REQUIRED_DOCUMENT_TYPES:
            continue
        counts[dtype] = counts.get(dtype, 0) + 1
        cur = latest.get(dtype)
        if cur is None or _sort_key(doc) > _sort_key(cur):
            latest[dtype] = doc
    return latest, counts


def _sort_key(doc):
    return (doc.uploaded_at or datetime.min, doc.id or 0)


def all_present(documents):
    latest, _ = latest_per_type(documents)
    return all(t in latest for t in REQUIRED_DOCUMENT_TYPES)


def all_approved(documents):
    """True iff every required type has exactly one row and it is approved.

    Duplicate rows for a type are a storage anomaly; the answer is then
    ``False`` so a badge is never granted from ambiguous data.
    """
    latest, counts = latest_per_type(documents)
    duplicates = sorted(t for t, n in counts.items() if n > 1)
    if duplicates:
        err = ConsistencyError(
            "Duplicate verification documents for types: " + ", ".join(duplicates),
            details={"document_types": duplicates},
        )
        current_app.logger.warning('%s', err.message)
        return False
    return all(
        t in latest and latest[t].status == DocumentStatus.APPROVED.value
        for t in REQUIRED_DOCUMENT_TYPES
    )


def derive_status(current, documents):
    """Status implied by the document set, starting from ``current``.

    Terminal statuses never change here. ``interview_scheduled`` is kept
    while all documents stay approved.
    """
    current = S(current)
    if current in TERMINAL_STATUSES:
        return current
    if all_approved(documents):
        if current is S.INTERVIEW_SCHEDULED:
            return current
        return S.DOCUMENTS_VERIFIED
    if all_present(documents):
        return S.DOCUMENTS_SUBMITTED
    return S.PENDING_DOCUMENTS


def load_educator(educator_id, lock=False):
    educator = db.session.get(EducatorProfile, educator_id, with_for_update=lock or None, populate_existing=True)
    if educator is None:
        raise NotFoundError('EducatorProfile', educator_id)
    return educator


def load_documents(educator_id):
    # populate_existing: always read the stored rows, never a stale identity map
    return (
        VerificationDocument.query
        .filter_by(educator_id=educator_id)
        .populate_existing()
        .all()
    )


def recompute_status(educator):
    """Re-derive the educator's status from the stored documents.

    The caller commits. Safe to retry: the result only depends on the rows
    currently stored.
    """
    documents = load_documents(educator.id)
    previous = educator.status
    target = derive_status(previous, documents)
    if target is not previous:
        educator.apply_status(target)
        current_app.logger.info('educator %s: %s -> %s (documents)', educator.id, previous.value, target.value)
    else:
        # heal a drifted projection
        badge, visible = project(previous)
        if educator.verification_badge != badge or educator.profile_visible != visible:
            current_app.logger.warning('educator %s: badge/visibility out of sync with %s, reset', educator.id, previous.value)
            educator.apply_status(previous)
    return target


def transition(educator, target):
    """Apply an explicit admin transition or raise TransitionError."""
    target = S(target)
    previous = educator.status
    if not can_transition(previous, target):
        raise TransitionError(previous.value, target.value)
    educator.apply_status(target)
    current_app.logger.info('educator %s: %s -> %s', educator.id, previous.value, target.value)
    return target


def reject_for_criminal_record(educator):
    """Short-circuit to the terminal criminal record rejection, from any status."""
    return transition(educator, S.REJECTED_CRIMINAL_RECORD)

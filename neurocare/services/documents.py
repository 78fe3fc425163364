"""Verification documents: one row per (educator, document type).

Uploading again replaces the file and resets the review, so a new file is
never carried by an earlier approval.
"""
import os
import time
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models.enums import DocumentType, DocumentStatus
from ..models.verification_document import VerificationDocument
from . import storage
from .errors import NotFoundError, RecomputeError, ValidationError
from .verification import load_educator, recompute_status

ALLOWED_EXTENSIONS = {'pdf', 'jpg', 'jpeg', 'png'}


def coerce_document_type(value):
    try:
        return DocumentType(value)
    except ValueError:
        raise ValidationError(
            f"Unknown document type: {value}",
            details={"allowed": [t.value for t in DocumentType]},
        )


def _file_size(file_storage):
    stream = getattr(file_storage, 'stream', file_storage)
    pos = stream.tell()
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(pos)
    return size


def validate_upload(file_storage, allowed=ALLOWED_EXTENSIONS, max_bytes=None):
    """Check presence, extension and size of an uploaded file."""
    if file_storage is None or not getattr(file_storage, 'filename', None):
        raise ValidationError("A file is required")
    ext = os.path.splitext(file_storage.filename)[1].lower().lstrip('.')
    if ext not in allowed:
        raise ValidationError(
            f"File type .{ext or '?'} not allowed",
            details={"allowed": sorted(allowed)},
        )
    max_bytes = max_bytes or current_app.config['MAX_UPLOAD_BYTES']
    size = _file_size(file_storage)
    if size == 0:
        raise ValidationError("The file is empty")
    if size > max_bytes:
        raise ValidationError(
            f"File too large ({size} bytes, max {max_bytes})",
            details={"size": size, "max_bytes": max_bytes},
        )
    return ext


def recompute_after_write(educator_id, action):
    """Re-derive the educator status once a document write is committed.

    The document write stands even if this fails; the caller gets a
    RecomputeError and can retry the recompute on its own.
    """
    try:
        educator = load_educator(educator_id, lock=True)
        recompute_status(educator)
        db.session.commit()
        return educator
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception('status recompute failed after %s for educator %s', action, educator_id)
        raise RecomputeError(
            "Document saved but the verification status could not be updated",
            details={"educator_id": educator_id, "action": action},
        ) from e


def _store_row(educator_id, dtype, path):
    """Create or overwrite the row for (educator, type); returns (doc, previous path)."""
    doc = VerificationDocument.query.filter_by(educator_id=educator_id, document_type=dtype.value).first()
    previous = None
    if doc is None:
        doc = VerificationDocument(educator_id=educator_id, document_type=dtype.value)
        db.session.add(doc)
    else:
        previous = doc.file_path
    doc.file_path = path
    doc.status = DocumentStatus.PENDING.value
    doc.uploaded_at = datetime.utcnow()
    doc.verified_at = None
    doc.rejection_reason = None
    db.session.commit()
    return doc, previous


def upload_document(educator, document_type, file_storage):
    """Store a (re-)uploaded document and return its row.

    The row goes back to ``pending`` with no verification date or rejection
    reason, then the educator status is recomputed.
    """
    dtype = coerce_document_type(document_type)
    validate_upload(file_storage)

    path = storage.build_path(f"educator{educator.id}", dtype.value, file_storage.filename, time.time())
    storage.upload(path, file_storage)

    try:
        doc, previous = _store_row(educator.id, dtype, path)
    except IntegrityError:
        # a concurrent first upload created the row; overwrite it
        db.session.rollback()
        try:
            doc, previous = _store_row(educator.id, dtype, path)
        except Exception:
            db.session.rollback()
            storage.remove(path)
            raise
    except Exception:
        db.session.rollback()
        storage.remove(path)
        raise

    if previous and previous != path:
        storage.remove(previous)
    current_app.logger.info('educator %s uploaded %s (%s)', educator.id, dtype.value, path)

    recompute_after_write(educator.id, 'upload')
    return doc


def list_documents(educator_id):
    return (
        VerificationDocument.query
        .filter_by(educator_id=educator_id)
        .order_by(VerificationDocument.document_type)
        .all()
    )


def get_document(document_id, lock=False):
    doc = db.session.get(VerificationDocument, document_id, with_for_update=lock or None, populate_existing=True)
    if doc is None:
        raise NotFoundError('VerificationDocument', document_id)
    return doc


def document_signed_url(document, ttl=None):
    return storage.get_signed_url(document.file_path, ttl)


def documents_with_urls(educator_id, ttl=None):
    items = []
    for doc in list_documents(educator_id):
        d = doc.to_dict()
        d['label'] = DocumentType(doc.document_type).label
        d['url'] = document_signed_url(doc, ttl)
        items.append(d)
    return items


def delete_document(document_id):
    """Remove a document row and its file, then recompute the owner's status."""
    doc = get_document(document_id, lock=True)
    educator_id = doc.educator_id
    path = doc.file_path
    try:
        db.session.delete(doc)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    storage.remove(path)
    current_app.logger.info('document %s (%s) of educator %s deleted', document_id, path, educator_id)
    recompute_after_write(educator_id, 'delete')

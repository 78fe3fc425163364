from flask import jsonify
from flask_login import current_user
from . import bp
from .forms import DocumentUploadForm, DiplomaAnalyzeForm, DiplomaForm
from ...models.enums import DocumentType, project
from ...services import diploma as diploma_service
from ...services import documents as document_service
from ...services.errors import AuthorizationError, NotFoundError, ValidationError
from ...services.verification import REQUIRED_DOCUMENT_TYPES
from ...utils.decorators import check_role

@bp.before_request
def _educator_only():
    check_role("educator")

def _educator():
    profile = current_user.educator_profile
    if profile is None:
        raise NotFoundError("EducatorProfile", f"user:{current_user.id}")
    return profile

def _form_error(form):
    raise ValidationError("Invalid form", details={"fields": form.errors})

@bp.get("")
def overview():
    educator = _educator()
    docs = {d["document_type"]: d for d in document_service.documents_with_urls(educator.id)}
    badge, visible = project(educator.status)
    return jsonify({
        "verification_status": educator.verification_status,
        "status_label": educator.status.label,
        "verification_badge": badge,
        "profile_visible": visible,
        "interview_scheduled_date": educator.interview_scheduled_date.isoformat() if educator.interview_scheduled_date else None,
        "documents": [
            docs.get(t) or {"document_type": t, "label": DocumentType(t).label, "status": None}
            for t in REQUIRED_DOCUMENT_TYPES
        ],
        "diploma": educator.diploma_dict(),
    })

@bp.post("/documents/<document_type>")
def upload_document(document_type):
    form = DocumentUploadForm()
    if not form.validate_on_submit():
        _form_error(form)
    educator = _educator()
    doc = document_service.upload_document(educator, document_type, form.file.data)
    return jsonify({"document": doc.to_dict(), "verification_status": educator.verification_status}), 201

@bp.get("/documents/<int:document_id>/url")
def document_url(document_id):
    educator = _educator()
    doc = document_service.get_document(document_id)
    if doc.educator_id != educator.id:
        raise AuthorizationError("This document belongs to another educator")
    return jsonify({"url": document_service.document_signed_url(doc)})

@bp.post("/diploma/analyze")
def analyze_diploma():
    """OCR preview before submission; advisory only, nothing is stored."""
    form = DiplomaAnalyzeForm()
    if not form.validate_on_submit():
        _form_error(form)
    return jsonify(diploma_service.analyze(form.file.data))

@bp.post("/diploma")
def submit_diploma():
    form = DiplomaForm()
    if not form.validate_on_submit():
        _form_error(form)
    educator = _educator()
    result = diploma_service.submit_diploma(
        educator, form.file.data,
        diploma_number=form.diploma_number.data,
        delivery_date=form.delivery_date.data,
        region=form.region.data,
    )
    return jsonify({
        "diploma": educator.diploma_dict(),
        "ocr": result["ocr"],
        "dreets_dispatched": result["dispatched"],
    }), 201

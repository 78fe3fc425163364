from io import BytesIO

from werkzeug.datastructures import FileStorage

from neurocare.extensions import db
from neurocare.models.educator import EducatorProfile
from neurocare.models.enums import DocumentType, VerificationStatus
from neurocare.models.user import User
from neurocare.services import documents, review

PASSWORD = "correct-horse-battery"
PDF_BYTES = b"%PDF-1.4\n1 0 obj <<>> endobj\ntrailer <<>>\n%%EOF\n"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def make_user(email, role, password=PASSWORD):
    user = User(email=email, role=role)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


def make_admin(email="admin@example.com"):
    return make_user(email, "admin")


def make_educator(email="edu@example.com", profession_type="educator",
                  status=VerificationStatus.PENDING_DOCUMENTS, **fields):
    user = make_user(email, "educator")
    educator = EducatorProfile(user_id=user.id, first_name=fields.pop("first_name", "Camille"),
                               last_name=fields.pop("last_name", "Martin"),
                               profession_type=profession_type, **fields)
    educator.apply_status(status)
    db.session.add(educator)
    db.session.commit()
    return educator


def pdf_file(name="document.pdf", data=PDF_BYTES):
    return FileStorage(stream=BytesIO(data), filename=name, content_type="application/pdf")


def png_file(name="diplome.png", data=PNG_BYTES):
    return FileStorage(stream=BytesIO(data), filename=name, content_type="image/png")


def upload_all(educator):
    """Upload the four required documents; returns {type: document}."""
    return {
        t.value: documents.upload_document(educator, t.value, pdf_file(f"{t.value}.pdf"))
        for t in DocumentType
    }


def approve_all(docs):
    for doc in docs.values():
        review.approve_document(doc.id)

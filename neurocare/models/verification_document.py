from datetime import datetime
from ..extensions import db
from .base import EducatorScopedMixin
from .enums import DocumentStatus

class VerificationDocument(db.Model, EducatorScopedMixin):
    __tablename__ = "verification_documents"

    id = db.Column(db.Integer, primary_key=True)
    # EducatorScopedMixin: educator_id
    document_type = db.Column(db.String(30), nullable=False)  # diploma/criminal_record/id_card/insurance
    file_path = db.Column(db.String(512), nullable=False)     # storage path
    status = db.Column(db.String(20), nullable=False, default=DocumentStatus.PENDING.value)
    uploaded_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    verified_at = db.Column(db.DateTime)
    rejection_reason = db.Column(db.Text)

    educator = db.relationship("EducatorProfile", back_populates="documents")

    __table_args__ = (
        db.UniqueConstraint('educator_id', 'document_type', name='uq_verification_documents_educator_type'),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "educator_id": self.educator_id,
            "document_type": self.document_type,
            "file_path": self.file_path,
            "status": self.status,
            "uploaded_at": self.uploaded_at.isoformat() if self.uploaded_at else None,
            "verified_at": self.verified_at.isoformat() if self.verified_at else None,
            "rejection_reason": self.rejection_reason,
        }

    def __repr__(self) -> str:
        return f"<VerificationDocument id={self.id} type={self.document_type} status={self.status}>"

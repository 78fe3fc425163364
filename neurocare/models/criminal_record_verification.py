from datetime import datetime
from ..extensions import db
from .base import EducatorScopedMixin

class CriminalRecordVerification(db.Model, EducatorScopedMixin):
    """Append-only evidence of each criminal record decision."""
    __tablename__ = "criminal_record_verifications"

    id = db.Column(db.Integer, primary_key=True)
    # EducatorScopedMixin: educator_id
    verified_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    is_clean = db.Column(db.Boolean, nullable=False)
    notes = db.Column(db.Text)

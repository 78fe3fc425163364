from ..extensions import db
from .base import EducatorScopedMixin

class DiplomaVerificationHistory(db.Model, EducatorScopedMixin):
    __tablename__ = "diploma_verification_history"

    id = db.Column(db.Integer, primary_key=True)
    # EducatorScopedMixin: educator_id
    action = db.Column(db.String(30), nullable=False)  # dreets_sent/dreets_responded/approved/rejected
    reason = db.Column(db.Text)
    dreets_verification_sent = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now(), nullable=False)

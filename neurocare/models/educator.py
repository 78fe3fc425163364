from ..extensions import db
from .base import TimestampMixin
from .enums import VerificationStatus, project

class EducatorProfile(db.Model, TimestampMixin):
    __tablename__ = "educator_profiles"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, unique=True)
    first_name = db.Column(db.String(120), nullable=False)
    last_name = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.String(40))
    profession_type = db.Column(db.String(50), nullable=False, default="educator")

    # verification pipeline; badge/visible only change through apply_status()
    verification_status = db.Column(db.String(40), nullable=False, index=True,
                                    default=VerificationStatus.PENDING_DOCUMENTS.value)
    verification_badge = db.Column(db.Boolean, nullable=False, default=False)
    profile_visible = db.Column(db.Boolean, nullable=False, default=False)
    admin_notes = db.Column(db.Text)
    interview_scheduled_date = db.Column(db.DateTime)

    # diploma
    diploma_url = db.Column(db.String(512))  # storage path, not a public URL
    diploma_verification_status = db.Column(db.String(20))  # pending/verified/rejected
    diploma_rejected_reason = db.Column(db.Text)
    diploma_submitted_at = db.Column(db.DateTime)
    diploma_verified_at = db.Column(db.DateTime)
    diploma_number = db.Column(db.String(64))
    diploma_delivery_date = db.Column(db.String(64))
    region = db.Column(db.String(80))
    diploma_ocr_text = db.Column(db.Text)
    diploma_ocr_confidence = db.Column(db.Float)
    diploma_ocr_analysis = db.Column(db.Text)

    # DREETS dispatch
    dreets_verification_sent_at = db.Column(db.DateTime)
    dreets_verified = db.Column(db.Boolean, nullable=False, default=False)
    dreets_response_date = db.Column(db.DateTime)

    user = db.relationship("User", back_populates="educator_profile")
    documents = db.relationship("VerificationDocument", back_populates="educator", lazy="dynamic")
    interviews = db.relationship("VideoInterview", back_populates="educator", lazy="dynamic")

    @property
    def status(self):
        return VerificationStatus(self.verification_status)

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    def apply_status(self, status):
        """Set the verification status together with its badge/visibility projection."""
        status = VerificationStatus(status)
        self.verification_status = status.value
        self.verification_badge, self.profile_visible = project(status)

    @classmethod
    def visible_query(cls):
        return cls.query.filter_by(
            verification_status=VerificationStatus.VERIFIED.value,
            profile_visible=True,
        )

    def to_dict(self):
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.user.email if self.user else None,
            "phone": self.phone,
            "profession_type": self.profession_type,
            "verification_status": self.verification_status,
            "verification_badge": self.verification_badge,
            "profile_visible": self.profile_visible,
            "admin_notes": self.admin_notes,
            "interview_scheduled_date": self.interview_scheduled_date.isoformat() if self.interview_scheduled_date else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def diploma_dict(self):
        return {
            "diploma_url": self.diploma_url,
            "diploma_verification_status": self.diploma_verification_status,
            "diploma_rejected_reason": self.diploma_rejected_reason,
            "diploma_number": self.diploma_number,
            "diploma_delivery_date": self.diploma_delivery_date,
            "region": self.region,
            "diploma_ocr_confidence": self.diploma_ocr_confidence,
            "diploma_ocr_analysis": self.diploma_ocr_analysis,
            "dreets_verification_sent_at": self.dreets_verification_sent_at.isoformat() if self.dreets_verification_sent_at else None,
            "dreets_verified": self.dreets_verified,
            "dreets_response_date": self.dreets_response_date.isoformat() if self.dreets_response_date else None,
        }

    def __repr__(self) -> str:
        return f"<EducatorProfile id={self.id} status={self.verification_status}>"

from ..extensions import db
from .base import EducatorScopedMixin, TimestampMixin
from .enums import InterviewStatus

class VideoInterview(db.Model, EducatorScopedMixin, TimestampMixin):
    __tablename__ = "video_interviews"

    id = db.Column(db.Integer, primary_key=True)
    # EducatorScopedMixin: educator_id
    scheduled_at = db.Column(db.DateTime)
    status = db.Column(db.String(20), nullable=False, default=InterviewStatus.PENDING.value)  # pending/passed/failed
    overall_result = db.Column(db.String(20))  # passed/failed
    failure_reason = db.Column(db.Text)
    completed_at = db.Column(db.DateTime)

    educator = db.relationship("EducatorProfile", back_populates="interviews")

    def to_dict(self):
        return {
            "id": self.id,
            "scheduled_at": self.scheduled_at.isoformat() if self.scheduled_at else None,
            "status": self.status,
            "overall_result": self.overall_result,
            "failure_reason": self.failure_reason,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }

    def __repr__(self) -> str:
        return f"<VideoInterview id={self.id} educator_id={self.educator_id} status={self.status}>"

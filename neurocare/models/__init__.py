from .user import User
from .educator import EducatorProfile
from .family import FamilyProfile
from .verification_document import VerificationDocument
from .criminal_record_verification import CriminalRecordVerification
from .video_interview import VideoInterview
from .diploma_history import DiplomaVerificationHistory
from .notification import Notification
from .subscription import Subscription
# base mixins and enums are imported by the above as needed

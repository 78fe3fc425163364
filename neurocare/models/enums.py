from enum import Enum


class VerificationStatus(str, Enum):
    PENDING_DOCUMENTS = "pending_documents"
    DOCUMENTS_SUBMITTED = "documents_submitted"
    DOCUMENTS_VERIFIED = "documents_verified"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    VERIFIED = "verified"
    REJECTED_CRIMINAL_RECORD = "rejected_criminal_record"
    REJECTED_INTERVIEW = "rejected_interview"

    @property
    def is_terminal(self):
        return self in TERMINAL_STATUSES

    @property
    def label(self):
        return STATUS_LABELS[self]


TERMINAL_STATUSES = frozenset({
    VerificationStatus.VERIFIED,
    VerificationStatus.REJECTED_CRIMINAL_RECORD,
    VerificationStatus.REJECTED_INTERVIEW,
})

STATUS_LABELS = {
    VerificationStatus.PENDING_DOCUMENTS: "En attente documents",
    VerificationStatus.DOCUMENTS_SUBMITTED: "Documents soumis",
    VerificationStatus.DOCUMENTS_VERIFIED: "Documents vérifiés",
    VerificationStatus.INTERVIEW_SCHEDULED: "Entretien planifié",
    VerificationStatus.VERIFIED: "Vérifié",
    VerificationStatus.REJECTED_CRIMINAL_RECORD: "Refusé (casier)",
    VerificationStatus.REJECTED_INTERVIEW: "Refusé (entretien)",
}


class DocumentType(str, Enum):
    DIPLOMA = "diploma"
    CRIMINAL_RECORD = "criminal_record"
    ID_CARD = "id_card"
    INSURANCE = "insurance"

    @property
    def label(self):
        return DOCUMENT_LABELS[self]


DOCUMENT_LABELS = {
    DocumentType.DIPLOMA: "Diplôme d'État (DEES/DEME)",
    DocumentType.CRIMINAL_RECORD: "Casier judiciaire B3",
    DocumentType.ID_CARD: "Pièce d'identité",
    DocumentType.INSURANCE: "Assurance RC Pro",
}


class DocumentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DiplomaStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class InterviewStatus(str, Enum):
    PENDING = "pending"
    PASSED = "passed"
    FAILED = "failed"


def project(status):
    """Map a verification status to its (verification_badge, profile_visible) pair."""
    status = VerificationStatus(status)
    if status is VerificationStatus.VERIFIED:
        return True, True
    return False, False

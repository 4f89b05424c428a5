from .enrollment import (
    ENROLLMENT_FAILURE_MESSAGE,
    ENROLLMENT_INSTRUCTIONS,
    ENROLLMENT_SUCCESS_MESSAGE,
    ConfirmTwoFactorEnrollmentResult,
    EnrollmentNotice,
    NoticeLevel,
    TwoFactorEnrollmentView,
)

__all__ = [
    "ENROLLMENT_FAILURE_MESSAGE",
    "ENROLLMENT_INSTRUCTIONS",
    "ENROLLMENT_SUCCESS_MESSAGE",
    "ConfirmTwoFactorEnrollmentResult",
    "EnrollmentNotice",
    "NoticeLevel",
    "TwoFactorEnrollmentView",
]

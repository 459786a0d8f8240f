"""Profile module for client and volunteer records."""

from mentormatch.profile.models import (
    OnboardingInfo,
    Person,
    ProfileQuiz,
    UserType,
)

__all__ = [
    "OnboardingInfo",
    "Person",
    "ProfileQuiz",
    "UserType",
]

"""Builders for profile and person records used across the test suite."""

from typing import Any, Dict, Optional

from mentormatch.matching.scorer import CompatibilityScorer
from mentormatch.profile.models import (
    AdviceStyle,
    BarrierType,
    ChangingSocialCircle,
    CheckInPreference,
    ComfortableTalkingStyle,
    CurrentChallenge,
    MeetingFrequency,
    MentorAgePreference,
    MentorEnergy,
    MentorType,
    OnboardingInfo,
    OpeningUpStyle,
    OpportunityType,
    Person,
    PreferredTimeOfDay,
    PriorityValue,
    ProfileQuiz,
    RelatableExperience,
    SessionPreference,
    StressResponsePreference,
    SupportType,
    TalkingTopic,
    TrustValue,
    UserType,
)

_UNSET: Any = object()


def complete_answers() -> Dict[str, Any]:
    """One answer for every non-legacy question."""
    return {
        "comfortable_talking_style": ComfortableTalkingStyle.LISTENS_MORE,
        "check_in_preference": CheckInPreference.TEXT,
        "opening_up_style": OpeningUpStyle.DIRECT_HONESTY,
        "advice_style": AdviceStyle.STEP_BY_STEP,
        "current_challenges": [CurrentChallenge.SCHOOL_WORK_CONSISTENCY],
        "support_type": SupportType.THINK_LONG_TERM,
        "changing_social_circle": ChangingSocialCircle.YES,
        "priority_value": PriorityValue.GETTING_JOB,
        "mentor_type": MentorType.CAREER_FOCUSED,
        "trust_value": TrustValue.HONESTY,
        "relatable_experiences": [RelatableExperience.DEALT_WITH_BARRIERS],
        "comfortable_talking_about": [TalkingTopic.TRADES_JOBS],
        "mentor_age_preference": MentorAgePreference.OLDER_WITH_EXPERIENCE,
        "opportunity_types": [OpportunityType.JOB_READINESS],
        "barriers": [BarrierType.TRANSPORTATION],
        "mentor_energy": MentorEnergy.STRUCTURED_ORGANIZED,
        "stress_response_preference": StressResponsePreference.BREAKS_DOWN_LOGICALLY,
        "meeting_frequency": MeetingFrequency.ONCE_PER_WEEK,
        "preferred_time_of_day": PreferredTimeOfDay.EVENING,
        "session_preference": SessionPreference.ONE_ON_ONE,
    }


def make_quiz(**overrides: Any) -> ProfileQuiz:
    """A complete questionnaire, with any answers replaced by ``overrides``."""
    return ProfileQuiz(**{**complete_answers(), **overrides})


def make_person(
    user_type: UserType,
    name: str,
    quiz: Optional[ProfileQuiz] = _UNSET,
    language: Optional[str] = None,
    **fields: Any
) -> Person:
    if quiz is _UNSET:
        quiz = make_quiz()
    onboarding = OnboardingInfo(preferred_language=language) if language else None
    return Person(
        id=fields.pop("id", name),
        user_type=user_type,
        name=name,
        onboarding=onboarding,
        profile_quiz=quiz,
        **fields,
    )


def make_client(name: str, quiz: Optional[ProfileQuiz] = _UNSET, **fields: Any) -> Person:
    return make_person(UserType.CLIENT, name, quiz, **fields)


def make_volunteer(name: str, quiz: Optional[ProfileQuiz] = _UNSET, **fields: Any) -> Person:
    return make_person(UserType.VOLUNTEER, name, quiz, **fields)


class TableScorer(CompatibilityScorer):
    """Scorer returning fixed scores per (client id, volunteer id)."""

    def __init__(self, scores: Dict[tuple, float], default: float = 0.0):
        self.scores = scores
        self.default = default
        self.calls = []

    def score(self, client: Person, volunteer: Person) -> float:
        self.calls.append((client.id, volunteer.id))
        return self.scores.get((client.id, volunteer.id), self.default)


def opposite_quiz() -> ProfileQuiz:
    """A complete questionnaire sharing no answer with ``make_quiz()``."""
    return ProfileQuiz(
        comfortable_talking_style=ComfortableTalkingStyle.SHARES_OWN_STORY,
        check_in_preference=CheckInPreference.CALL,
        opening_up_style=OpeningUpStyle.HUMOR_RELAXED,
        advice_style=AdviceStyle.STRAIGHTFORWARD_BLUNT,
        current_challenges=[CurrentChallenge.MENTAL_HEALTH_FOCUS],
        support_type=SupportType.REMIND_STEPS_DEADLINES,
        changing_social_circle=ChangingSocialCircle.NO,
        priority_value=PriorityValue.FINISHING_SCHOOL,
        mentor_type=MentorType.EMOTIONAL_SUPPORT,
        trust_value=TrustValue.LOYALTY,
        relatable_experiences=[RelatableExperience.STRUGGLED_WITH_ADHD],
        comfortable_talking_about=[TalkingTopic.FAMILY_ISSUES],
        mentor_age_preference=MentorAgePreference.CLOSER_TO_AGE,
        opportunity_types=[OpportunityType.GED_DIPLOMA],
        barriers=[BarrierType.CHILDCARE],
        mentor_energy=MentorEnergy.CHILL_RELAXED,
        stress_response_preference=StressResponsePreference.JUST_LISTENS,
        meeting_frequency=MeetingFrequency.TWICE_PER_WEEK,
        preferred_time_of_day=PreferredTimeOfDay.MORNING,
        session_preference=SessionPreference.GROUPS_ONLY,
    )

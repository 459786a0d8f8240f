"""Pydantic models for client and volunteer profile data."""

import uuid
from datetime import date
from enum import Enum
from typing import ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field


class UserType(str, Enum):
    """Role of a person in the matching program."""

    CLIENT = "client"  # Person on parole/probation
    VOLUNTEER = "volunteer"


class Interest(str, Enum):
    """Interests collected during onboarding."""

    ART = "art"
    DANCE = "dance"
    MUSIC = "music"
    SPORTS = "sports"
    READING = "reading"
    COOKING = "cooking"
    PHOTOGRAPHY = "photography"
    WRITING = "writing"
    GAMING = "gaming"
    FITNESS = "fitness"
    GARDENING = "gardening"
    CRAFTS = "crafts"
    TECHNOLOGY = "technology"
    TRAVEL = "travel"
    VOLUNTEERING = "volunteering"


# Category 1: Trust & Communication Style

class ComfortableTalkingStyle(str, Enum):
    SHARES_OWN_STORY = "shares_own_story"
    KEEPS_PROFESSIONAL = "keeps_professional"
    LISTENS_MORE = "listens_more"
    GIVES_CLEAR_STEPS = "gives_clear_steps"


class CheckInPreference(str, Enum):
    TEXT = "text"
    CALL = "call"
    IN_PERSON_ONLY = "in_person_only"
    NO_PREFERENCE = "no_preference"


class OpeningUpStyle(str, Enum):
    CONSISTENT_CHECK_INS = "consistent_check_ins"
    HUMOR_RELAXED = "humor_relaxed"
    DIRECT_HONESTY = "direct_honesty"
    SHARED_BACKGROUND = "shared_background"


class AdviceStyle(str, Enum):
    STRAIGHTFORWARD_BLUNT = "straightforward_blunt"
    ENCOURAGING_PATIENT = "encouraging_patient"
    STEP_BY_STEP = "step_by_step"
    FIGURE_IT_OUT_MYSELF = "figure_it_out_myself"


# Category 2: Environment & Stability Needs

class CurrentChallenge(str, Enum):
    STAYING_AWAY_FROM_PEOPLE = "staying_away_from_people"
    KEEPING_UP_WITH_PO = "keeping_up_with_po"
    SCHOOL_WORK_CONSISTENCY = "school_work_consistency"
    MENTAL_HEALTH_FOCUS = "mental_health_focus"
    HOUSING_FOOD_STABILITY = "housing_food_stability"


class SupportType(str, Enum):
    REMIND_STEPS_DEADLINES = "remind_steps_deadlines"
    THINK_LONG_TERM = "think_long_term"
    TALK_WHEN_OVERWHELMING = "talk_when_overwhelming"
    GONE_THROUGH_SYSTEM = "gone_through_system"


class ChangingSocialCircle(str, Enum):
    YES = "yes"
    NO = "no"
    TRYING_COMPLICATED = "trying_complicated"


# Category 3: Values & Motivation

class PriorityValue(str, Enum):
    GETTING_JOB = "getting_job"
    FINISHING_SCHOOL = "finishing_school"
    STABLE_HOUSING = "stable_housing"
    STAYING_OUT_OF_SYSTEM = "staying_out_of_system"
    HELPING_FAMILY = "helping_family"
    PERSONAL_GROWTH = "personal_growth"


class MentorType(str, Enum):
    BEEN_THROUGH_SYSTEM = "been_through_system"
    CAREER_FOCUSED = "career_focused"
    EMOTIONAL_SUPPORT = "emotional_support"
    ORGANIZATION_ADHD = "organization_adhd"
    JUST_CONSISTENT = "just_consistent"


class TrustValue(str, Enum):
    HONESTY = "honesty"
    LOYALTY = "loyalty"
    UNDERSTANDING = "understanding"
    SENSE_OF_HUMOR = "sense_of_humor"
    GOAL_ORIENTED = "goal_oriented"


# Category 4: Lived Experience Matching

class RelatableExperience(str, Enum):
    STRUGGLED_WITH_ADHD = "struggled_with_adhd"
    RESTART_AFTER_MESSING_UP = "restart_after_messing_up"
    UNDERSTANDS_SUPERVISION = "understands_supervision"
    DEALT_WITH_BARRIERS = "dealt_with_barriers"
    SIMILAR_NEIGHBORHOOD = "similar_neighborhood"


class TalkingTopic(str, Enum):
    PO_COMMUNICATION = "po_communication"
    STRESS_ANGER = "stress_anger"
    SCHOOL_CREDIT = "school_credit"
    TRADES_JOBS = "trades_jobs"
    FAMILY_ISSUES = "family_issues"


class MentorAgePreference(str, Enum):
    CLOSER_TO_AGE = "closer_to_age"
    OLDER_WITH_EXPERIENCE = "older_with_experience"
    DOESNT_MATTER = "doesnt_matter"


# Category 5: Practical Support Needs

class OpportunityType(str, Enum):
    JOB_READINESS = "job_readiness"
    TRADES_HANDS_ON = "trades_hands_on"
    GED_DIPLOMA = "ged_diploma"
    COLLEGE_POST_SECONDARY = "college_post_secondary"
    DIGITAL_LITERACY = "digital_literacy"
    NOT_SURE_YET = "not_sure_yet"


class BarrierType(str, Enum):
    TRANSPORTATION = "transportation"
    SCHEDULING_REMEMBERING = "scheduling_remembering"
    CHILDCARE = "childcare"
    SCHOOL_ATTENDANCE = "school_attendance"
    SUBSTANCE_SCREENING = "substance_screening"
    FEAR_OF_JUDGMENT = "fear_of_judgment"
    NONE_OF_ABOVE = "none_of_above"


# Category 6: Personality Fit

class MentorEnergy(str, Enum):
    CHILL_RELAXED = "chill_relaxed"
    HIGH_ENERGY_MOTIVATING = "high_energy_motivating"
    STRUCTURED_ORGANIZED = "structured_organized"
    PATIENT_SLOW_PACED = "patient_slow_paced"
    MIX = "mix"


class StressResponsePreference(str, Enum):
    LIGHTENS_MOOD = "lightens_mood"
    BREAKS_DOWN_LOGICALLY = "breaks_down_logically"
    JUST_LISTENS = "just_listens"
    PUSHES_TO_ACT = "pushes_to_act"
    GIVES_SPACE_CHECKS_IN = "gives_space_checks_in"


# Category 7: Commitment & Meeting Style

class MeetingFrequency(str, Enum):
    ONCE_PER_WEEK = "once_per_week"
    TWICE_PER_WEEK = "twice_per_week"
    THREE_TIMES_PER_WEEK = "three_times_per_week"
    FLEXIBLE = "flexible"


class PreferredTimeOfDay(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    WEEKENDS_ONLY = "weekends_only"


class SessionPreference(str, Enum):
    ONE_ON_ONE = "one_on_one"
    GROUPS_ONLY = "groups_only"
    MIX_OF_BOTH = "mix_of_both"


class OnboardingInfo(BaseModel):
    """Details collected at account creation."""

    model_config = ConfigDict(frozen=True)

    date_of_birth: Optional[date] = Field(None, description="Date of birth")
    phone_number: Optional[str] = Field(None, description="Phone number")
    address: Optional[str] = Field(None, description="Home address")
    preferred_language: Optional[str] = Field(None, description="Preferred spoken language")
    interests: list[Interest] = Field(default_factory=list, description="Interests/hobbies")


class ProfileQuiz(BaseModel):
    """Compatibility questionnaire answered by both clients and volunteers.

    Every single-choice answer is optional and every multi-select answer
    may be empty; unanswered questions are excluded from scoring rather
    than counted as disagreement.
    """

    model_config = ConfigDict(frozen=True)

    # Category 1: Trust & Communication Style
    comfortable_talking_style: Optional[ComfortableTalkingStyle] = None
    check_in_preference: Optional[CheckInPreference] = None
    opening_up_style: Optional[OpeningUpStyle] = None
    advice_style: Optional[AdviceStyle] = None

    # Category 2: Environment & Stability Needs
    current_challenges: list[CurrentChallenge] = Field(default_factory=list)
    support_type: Optional[SupportType] = None
    changing_social_circle: Optional[ChangingSocialCircle] = None

    # Category 3: Values & Motivation
    priority_value: Optional[PriorityValue] = None
    mentor_type: Optional[MentorType] = None
    trust_value: Optional[TrustValue] = None

    # Category 4: Lived Experience Matching
    relatable_experiences: list[RelatableExperience] = Field(default_factory=list)
    comfortable_talking_about: list[TalkingTopic] = Field(default_factory=list)
    mentor_age_preference: Optional[MentorAgePreference] = None

    # Category 5: Practical Support Needs
    opportunity_types: list[OpportunityType] = Field(default_factory=list)
    barriers: list[BarrierType] = Field(default_factory=list)

    # Category 6: Personality Fit
    mentor_energy: Optional[MentorEnergy] = None
    stress_response_preference: Optional[StressResponsePreference] = None

    # Category 7: Commitment & Meeting Style
    meeting_frequency: Optional[MeetingFrequency] = None
    preferred_time_of_day: Optional[PreferredTimeOfDay] = None
    session_preference: Optional[SessionPreference] = None

    # Legacy answers, only used for the small language bonus
    language_preference: Optional[str] = None
    neighborhood: Optional[str] = None

    LEGACY_FIELDS: ClassVar[tuple[str, ...]] = ("language_preference", "neighborhood")

    @property
    def is_complete(self) -> bool:
        """True when every non-legacy question has been answered."""
        for field_name in type(self).model_fields:
            if field_name in self.LEGACY_FIELDS:
                continue
            value = getattr(self, field_name)
            if value is None:
                return False
            if isinstance(value, list) and len(value) == 0:
                return False
        return True

    def completion_percentage(self) -> float:
        """Percentage of non-legacy questions answered."""
        total_fields = 0
        filled_fields = 0

        for field_name in type(self).model_fields:
            if field_name in self.LEGACY_FIELDS:
                continue
            total_fields += 1
            value = getattr(self, field_name)
            if value is None:
                continue
            if isinstance(value, list) and len(value) == 0:
                continue
            filled_fields += 1

        return (filled_fields / total_fields * 100) if total_fields > 0 else 0.0


def _new_id() -> str:
    return str(uuid.uuid4())


class Person(BaseModel):
    """A client or volunteer record as seen by the matching core.

    Records are immutable; use ``with_volunteer`` / ``with_client`` (or
    ``model_copy``) to derive an updated record and hand it to the store.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    user_type: UserType
    name: str = ""
    email: str = ""
    onboarding: Optional[OnboardingInfo] = None
    profile_quiz: Optional[ProfileQuiz] = None

    matched_volunteer_id: Optional[str] = Field(None, description="For clients")
    matched_client_ids: list[str] = Field(default_factory=list, description="For volunteers")
    capacity: Optional[int] = Field(
        None, ge=0, description="Volunteer-specific cap on concurrent clients"
    )

    version: int = Field(0, ge=0, description="Optimistic-concurrency counter")
    created_at: Optional[date] = Field(default_factory=date.today)

    @property
    def is_client(self) -> bool:
        return self.user_type == UserType.CLIENT

    @property
    def is_volunteer(self) -> bool:
        return self.user_type == UserType.VOLUNTEER

    @property
    def has_complete_profile(self) -> bool:
        return self.profile_quiz is not None and self.profile_quiz.is_complete

    @property
    def current_load(self) -> int:
        return len(self.matched_client_ids)

    def effective_capacity(self, max_clients_per_volunteer: int) -> int:
        """Capacity after applying the program-wide limit."""
        if self.capacity is None:
            return max_clients_per_volunteer
        return min(self.capacity, max_clients_per_volunteer)

    def remaining_capacity(self, max_clients_per_volunteer: int) -> int:
        return max(0, self.effective_capacity(max_clients_per_volunteer) - self.current_load)

    def with_volunteer(self, volunteer_id: str) -> "Person":
        """Return a copy of this client pointing at ``volunteer_id``."""
        return self.model_copy(update={"matched_volunteer_id": volunteer_id})

    def with_client(self, client_id: str) -> "Person":
        """Return a copy of this volunteer holding ``client_id`` (idempotent)."""
        if client_id in self.matched_client_ids:
            return self
        return self.model_copy(
            update={"matched_client_ids": [*self.matched_client_ids, client_id]}
        )

    def get_summary(self) -> dict:
        """Get a summary of key attributes for display."""
        quiz = self.profile_quiz
        return {
            "id": self.id,
            "name": self.name,
            "type": self.user_type.value,
            "profile_complete": self.has_complete_profile,
            "completion": f"{quiz.completion_percentage():.0f}%" if quiz else "0%",
            "matched_volunteer_id": self.matched_volunteer_id,
            "matched_clients": len(self.matched_client_ids),
        }

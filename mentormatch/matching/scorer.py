"""Compatibility score calculation between a client and a volunteer.

Seven weighted categories (weights sum to 1.0):
- communication * 0.20
- stability * 0.15
- values * 0.20
- lived_experience * 0.15
- practical_support * 0.15
- personality * 0.10
- commitment * 0.05
plus a 0.05 legacy language bonus when both sides filled it in.

A category only counts toward the denominator when at least one of its
questions was answered by both sides, so missing data never drags the
score down.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from mentormatch.profile.models import (
    CheckInPreference,
    MeetingFrequency,
    MentorAgePreference,
    MentorEnergy,
    Person,
    ProfileQuiz,
    SessionPreference,
)

logger = logging.getLogger(__name__)


@dataclass
class CategoryScore:
    """Score for one category before weighting."""
    name: str
    weight: float
    score: float          # Mean of answered sub-questions (0.0-1.0)
    factors: int          # Sub-questions answered by both sides


@dataclass
class CompatibilityBreakdown:
    """Complete compatibility score with per-category detail."""
    total: float                  # Normalized score (0.0-1.0)
    weighted_sum: float
    applicable_weight: float
    categories: List[CategoryScore] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": round(self.total, 3),
            "applicable_weight": round(self.applicable_weight, 3),
            "breakdown": {
                c.name: {
                    "score": round(c.score, 3),
                    "weight": c.weight,
                    "factors": c.factors,
                }
                for c in self.categories
            },
        }

    @property
    def total_percentage(self) -> int:
        """Return total as percentage (0-100)."""
        return int(round(self.total * 100))


EMPTY_BREAKDOWN = CompatibilityBreakdown(total=0.0, weighted_sum=0.0, applicable_weight=0.0)


class CompatibilityScorer:
    """Calculates compatibility scores for client-volunteer pairs."""

    WEIGHT_COMMUNICATION = 0.20
    WEIGHT_STABILITY = 0.15
    WEIGHT_VALUES = 0.20
    WEIGHT_EXPERIENCE = 0.15
    WEIGHT_PRACTICAL = 0.15
    WEIGHT_PERSONALITY = 0.10
    WEIGHT_COMMITMENT = 0.05

    # Legacy auxiliary answers
    WEIGHT_LEGACY_LANGUAGE = 0.05

    # Partial credit when one side answered a "neutral" value
    NO_PREFERENCE_CREDIT = 0.5
    MIXED_STYLE_CREDIT = 0.5
    FLEXIBLE_FREQUENCY_CREDIT = 0.7

    def score(self, client: Person, volunteer: Person) -> float:
        """Return the normalized compatibility score (0.0-1.0)."""
        return self.breakdown(client, volunteer).total

    def breakdown(self, client: Person, volunteer: Person) -> CompatibilityBreakdown:
        """Calculate the score with per-category detail.

        Returns:
            CompatibilityBreakdown; total is exactly 0.0 if either profile is absent
        """
        client_quiz = client.profile_quiz
        volunteer_quiz = volunteer.profile_quiz
        if client_quiz is None or volunteer_quiz is None:
            return EMPTY_BREAKDOWN

        categories = [
            self._score_communication(client_quiz, volunteer_quiz),
            self._score_stability(client_quiz, volunteer_quiz),
            self._score_values(client_quiz, volunteer_quiz),
            self._score_experience(client_quiz, volunteer_quiz),
            self._score_practical(client_quiz, volunteer_quiz),
            self._score_personality(client_quiz, volunteer_quiz),
            self._score_commitment(client_quiz, volunteer_quiz),
            self._score_legacy_language(client_quiz, volunteer_quiz),
        ]
        applicable = [c for c in categories if c.factors > 0]

        weighted_sum = sum(c.score * c.weight for c in applicable)
        applicable_weight = sum(c.weight for c in applicable)
        total = weighted_sum / applicable_weight if applicable_weight > 0 else 0.0

        return CompatibilityBreakdown(
            total=min(1.0, max(0.0, total)),
            weighted_sum=weighted_sum,
            applicable_weight=applicable_weight,
            categories=applicable,
        )

    def score_matrix(
        self,
        clients: Sequence[Person],
        volunteers: Sequence[Person]
    ) -> List[List[float]]:
        """Score every pair; rows are clients, columns volunteers."""
        matrix = [[self.score(c, v) for v in volunteers] for c in clients]
        logger.info(f"Calculated {len(clients) * len(volunteers)} compatibility scores")
        return matrix

    # Sub-question helpers

    @staticmethod
    def _exact(client_value: Optional[Enum], volunteer_value: Optional[Enum]) -> Optional[float]:
        if client_value is None or volunteer_value is None:
            return None
        return 1.0 if client_value == volunteer_value else 0.0

    @staticmethod
    def _neutral(
        client_value: Optional[Enum],
        volunteer_value: Optional[Enum],
        neutral: Enum,
        credit: float
    ) -> Optional[float]:
        """Exact match scores 1.0; a neutral answer on either side earns ``credit``."""
        if client_value is None or volunteer_value is None:
            return None
        if client_value == volunteer_value:
            return 1.0
        if client_value == neutral or volunteer_value == neutral:
            return credit
        return 0.0

    @staticmethod
    def _overlap(client_values: List[Enum], volunteer_values: List[Enum]) -> Optional[float]:
        """Fraction of the client's selections the volunteer shares."""
        if not client_values or not volunteer_values:
            return None
        client_set = set(client_values)
        return len(client_set & set(volunteer_values)) / len(client_set)

    @staticmethod
    def _category(name: str, weight: float, sub_scores: List[Optional[float]]) -> CategoryScore:
        answered = [s for s in sub_scores if s is not None]
        if not answered:
            return CategoryScore(name=name, weight=weight, score=0.0, factors=0)
        return CategoryScore(
            name=name,
            weight=weight,
            score=sum(answered) / len(answered),
            factors=len(answered),
        )

    # Categories

    def _score_communication(self, c: ProfileQuiz, v: ProfileQuiz) -> CategoryScore:
        return self._category("communication", self.WEIGHT_COMMUNICATION, [
            self._neutral(
                c.check_in_preference, v.check_in_preference,
                CheckInPreference.NO_PREFERENCE, self.NO_PREFERENCE_CREDIT,
            ),
            self._exact(c.opening_up_style, v.opening_up_style),
            self._exact(c.advice_style, v.advice_style),
        ])

    def _score_stability(self, c: ProfileQuiz, v: ProfileQuiz) -> CategoryScore:
        # Volunteer experience with the client's current challenges
        return self._category("stability", self.WEIGHT_STABILITY, [
            self._exact(c.support_type, v.support_type),
            self._overlap(c.current_challenges, v.current_challenges),
        ])

    def _score_values(self, c: ProfileQuiz, v: ProfileQuiz) -> CategoryScore:
        return self._category("values", self.WEIGHT_VALUES, [
            self._exact(c.priority_value, v.priority_value),
            self._exact(c.mentor_type, v.mentor_type),
            self._exact(c.trust_value, v.trust_value),
        ])

    def _score_experience(self, c: ProfileQuiz, v: ProfileQuiz) -> CategoryScore:
        return self._category("lived_experience", self.WEIGHT_EXPERIENCE, [
            self._overlap(c.relatable_experiences, v.relatable_experiences),
            self._overlap(c.comfortable_talking_about, v.comfortable_talking_about),
            self._neutral(
                c.mentor_age_preference, v.mentor_age_preference,
                MentorAgePreference.DOESNT_MATTER, 1.0,
            ),
        ])

    def _score_practical(self, c: ProfileQuiz, v: ProfileQuiz) -> CategoryScore:
        return self._category("practical_support", self.WEIGHT_PRACTICAL, [
            self._overlap(c.opportunity_types, v.opportunity_types),
            self._overlap(c.barriers, v.barriers),
        ])

    def _score_personality(self, c: ProfileQuiz, v: ProfileQuiz) -> CategoryScore:
        return self._category("personality", self.WEIGHT_PERSONALITY, [
            self._neutral(
                c.mentor_energy, v.mentor_energy,
                MentorEnergy.MIX, self.MIXED_STYLE_CREDIT,
            ),
            self._exact(c.stress_response_preference, v.stress_response_preference),
        ])

    def _score_commitment(self, c: ProfileQuiz, v: ProfileQuiz) -> CategoryScore:
        return self._category("commitment", self.WEIGHT_COMMITMENT, [
            self._neutral(
                c.meeting_frequency, v.meeting_frequency,
                MeetingFrequency.FLEXIBLE, self.FLEXIBLE_FREQUENCY_CREDIT,
            ),
            self._exact(c.preferred_time_of_day, v.preferred_time_of_day),
            self._neutral(
                c.session_preference, v.session_preference,
                SessionPreference.MIX_OF_BOTH, self.MIXED_STYLE_CREDIT,
            ),
        ])

    def _score_legacy_language(self, c: ProfileQuiz, v: ProfileQuiz) -> CategoryScore:
        client_lang = (c.language_preference or "").strip().lower()
        volunteer_lang = (v.language_preference or "").strip().lower()
        if not client_lang or not volunteer_lang:
            sub_score = None
        else:
            sub_score = 1.0 if client_lang == volunteer_lang else 0.0
        return self._category("legacy_language", self.WEIGHT_LEGACY_LANGUAGE, [sub_score])

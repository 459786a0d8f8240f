"""Eligibility (hard filter) rules.

Evaluates a single client-volunteer pair against pass/fail rules before
any scoring happens. Rules run in a fixed order and stop at the first
failure so the reported reason is stable for diagnostics.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from mentormatch.profile.models import Person

logger = logging.getLogger(__name__)


class EligibilityReason(str, Enum):
    """Why a pair was rejected."""
    LEGAL_RESTRICTION = "legal_restriction"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    NO_SCHEDULE_OVERLAP = "no_schedule_overlap"
    LANGUAGE_MISMATCH = "language_mismatch"
    DISTANCE_TOO_FAR = "distance_too_far"
    INCOMPLETE_PROFILE = "incomplete_profile"
    ALREADY_MATCHED = "already_matched"


class EligibilityConfig(BaseModel):
    """Toggles for the hard filter rules."""

    max_clients_per_volunteer: int = Field(3, ge=0)
    require_schedule_overlap: bool = True
    require_language_match: bool = False
    max_distance_miles: Optional[float] = Field(None, gt=0)
    require_legal_compliance: bool = True


@dataclass(frozen=True)
class EligibilityOutcome:
    """Result of evaluating one pair. ``reason`` is set only on failure."""
    reason: Optional[EligibilityReason] = None

    @property
    def passed(self) -> bool:
        return self.reason is None

    @classmethod
    def ok(cls) -> "EligibilityOutcome":
        return cls()

    @classmethod
    def failed(cls, reason: EligibilityReason) -> "EligibilityOutcome":
        return cls(reason=reason)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "reason": self.reason.value if self.reason else None,
        }


PASSED = EligibilityOutcome.ok()


class EligibilityFilter:
    """Applies the hard filter rules to client-volunteer pairs."""

    def __init__(self, config: Optional[EligibilityConfig] = None):
        self.config = config or EligibilityConfig()

    def evaluate(
        self,
        client: Person,
        volunteer: Person,
        config: Optional[EligibilityConfig] = None
    ) -> EligibilityOutcome:
        """Evaluate all rules for a pair.

        Args:
            client: Client record
            volunteer: Volunteer record
            config: Overrides the filter's own configuration for this call

        Returns:
            PASSED, or a failed outcome carrying the first failing rule
        """
        config = config or self.config

        if config.require_legal_compliance:
            if not self._check_legal_compliance(client, volunteer):
                return EligibilityOutcome.failed(EligibilityReason.LEGAL_RESTRICTION)

        capacity = volunteer.effective_capacity(config.max_clients_per_volunteer)
        if volunteer.current_load >= capacity:
            return EligibilityOutcome.failed(EligibilityReason.CAPACITY_EXCEEDED)

        if config.require_schedule_overlap:
            if not self._check_schedule_overlap(client, volunteer):
                return EligibilityOutcome.failed(EligibilityReason.NO_SCHEDULE_OVERLAP)

        if config.require_language_match:
            if not self._check_language_match(client, volunteer):
                return EligibilityOutcome.failed(EligibilityReason.LANGUAGE_MISMATCH)

        if config.max_distance_miles is not None:
            if not self._check_distance(client, volunteer, config.max_distance_miles):
                return EligibilityOutcome.failed(EligibilityReason.DISTANCE_TOO_FAR)

        if not client.has_complete_profile or not volunteer.has_complete_profile:
            return EligibilityOutcome.failed(EligibilityReason.INCOMPLETE_PROFILE)

        if client.matched_volunteer_id == volunteer.id:
            return EligibilityOutcome.failed(EligibilityReason.ALREADY_MATCHED)

        return PASSED

    def filter_volunteers(
        self,
        client: Person,
        volunteers: List[Person],
        config: Optional[EligibilityConfig] = None
    ) -> List[Person]:
        """Return the volunteers that pass every rule for ``client``, in input order."""
        eligible = [
            volunteer for volunteer in volunteers
            if self.evaluate(client, volunteer, config).passed
        ]
        logger.debug(
            f"Client {client.id}: {len(eligible)}/{len(volunteers)} volunteers eligible"
        )
        return eligible

    # Individual rules

    def _check_legal_compliance(self, client: Person, volunteer: Person) -> bool:
        # No legal restrictions are modeled yet (age, background checks, ...)
        return True

    def _check_schedule_overlap(self, client: Person, volunteer: Person) -> bool:
        # Calendar availability lives outside the core; a completed
        # questionnaire on both sides is treated as overlapping.
        return client.profile_quiz is not None and volunteer.profile_quiz is not None

    def _check_language_match(self, client: Person, volunteer: Person) -> bool:
        client_lang = client.onboarding.preferred_language if client.onboarding else None
        volunteer_lang = volunteer.onboarding.preferred_language if volunteer.onboarding else None

        if not client_lang or not volunteer_lang:
            return False

        return client_lang.strip().lower() == volunteer_lang.strip().lower()

    def _check_distance(self, client: Person, volunteer: Person, max_miles: float) -> bool:
        # Geocoding is not available; every pair is considered in range.
        return True

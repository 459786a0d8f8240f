"""Ranked match suggestions for a single client."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from mentormatch.matching.eligibility import EligibilityFilter
from mentormatch.matching.scorer import CompatibilityScorer
from mentormatch.profile.models import Person

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchResult:
    """A candidate volunteer with its compatibility score."""
    volunteer: Person
    score: float

    GOOD_MATCH_THRESHOLD = 0.6

    @property
    def is_good_match(self) -> bool:
        return self.score >= self.GOOD_MATCH_THRESHOLD

    @property
    def compatibility_level(self) -> str:
        if self.score >= 0.8:
            return "Excellent"
        elif self.score >= 0.6:
            return "Good"
        elif self.score >= 0.4:
            return "Fair"
        return "Low"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "volunteer_id": self.volunteer.id,
            "volunteer_name": self.volunteer.name,
            "score": round(self.score, 3),
            "level": self.compatibility_level,
        }


class MatchingEngine:
    """Scores and ranks volunteers for one client without the batch solver."""

    def __init__(
        self,
        eligibility_filter: Optional[EligibilityFilter] = None,
        scorer: Optional[CompatibilityScorer] = None
    ):
        self.eligibility_filter = eligibility_filter or EligibilityFilter()
        self.scorer = scorer or CompatibilityScorer()

    def find_matches(self, client: Person, volunteers: Sequence[Person]) -> List[MatchResult]:
        """Rank eligible volunteers for ``client``.

        Args:
            client: Client with a completed questionnaire
            volunteers: Candidate pool, in the caller's preferred order

        Returns:
            MatchResults sorted by descending score; ties keep input order.
            Empty if ``client`` is not a client or its profile is incomplete.
        """
        if not client.is_client or not client.has_complete_profile:
            return []

        available = [
            v for v in volunteers
            if v.is_volunteer
            and v.has_complete_profile
            and client.id not in v.matched_client_ids
        ]
        eligible = self.eligibility_filter.filter_volunteers(client, available)

        matches = [MatchResult(volunteer=v, score=self.scorer.score(client, v)) for v in eligible]
        # list.sort is stable, so equal scores keep the candidate order
        matches.sort(key=lambda m: m.score, reverse=True)

        logger.info(f"Found {len(matches)} candidate volunteers for client {client.id}")
        return matches

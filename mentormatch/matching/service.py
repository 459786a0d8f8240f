"""Store-backed matching operations for one client at a time."""

import logging
from typing import List, Optional

from pydantic import BaseModel, Field

from mentormatch.errors import (
    InsufficientCandidatesError,
    InvalidUserTypeError,
    PersonNotFoundError,
    ProfileIncompleteError,
)
from mentormatch.matching.engine import MatchingEngine, MatchResult
from mentormatch.profile.models import (
    CheckInPreference,
    MentorAgePreference,
    MentorEnergy,
    MentorType,
    Person,
)
from mentormatch.storage.store import PersonStore

logger = logging.getLogger(__name__)


class MatchingCriteria(BaseModel):
    """Optional soft preferences applied before ranking.

    A volunteer who left a question unanswered is not excluded by it.
    """

    min_match_score: float = Field(0.5, ge=0.0, le=1.0)
    preferred_check_in: Optional[CheckInPreference] = None
    required_mentor_types: list[MentorType] = Field(default_factory=list)
    preferred_mentor_energy: Optional[MentorEnergy] = None
    preferred_age: Optional[MentorAgePreference] = None

    def matches(self, volunteer: Person) -> bool:
        quiz = volunteer.profile_quiz
        if quiz is None:
            return False

        if self.preferred_check_in and quiz.check_in_preference:
            neutral = CheckInPreference.NO_PREFERENCE
            if (self.preferred_check_in != quiz.check_in_preference
                    and neutral not in (self.preferred_check_in, quiz.check_in_preference)):
                return False

        if self.required_mentor_types and quiz.mentor_type:
            if quiz.mentor_type not in self.required_mentor_types:
                return False

        if self.preferred_mentor_energy and quiz.mentor_energy:
            if self.preferred_mentor_energy != quiz.mentor_energy:
                return False

        if self.preferred_age and quiz.mentor_age_preference:
            neutral = MentorAgePreference.DOESNT_MATTER
            if (self.preferred_age != quiz.mentor_age_preference
                    and neutral not in (self.preferred_age, quiz.mentor_age_preference)):
                return False

        return True


class MatchingService:
    """Finds and assigns volunteers for individual clients."""

    def __init__(self, store: PersonStore, engine: Optional[MatchingEngine] = None):
        self.store = store
        self.engine = engine or MatchingEngine()

    def _get(self, person_id: str) -> Person:
        person = self.store.get(person_id)
        if person is None:
            raise PersonNotFoundError(person_id)
        return person

    def find_matches_for(
        self,
        client_id: str,
        criteria: Optional[MatchingCriteria] = None
    ) -> List[MatchResult]:
        """Rank volunteers for a stored client.

        Raises:
            PersonNotFoundError: Unknown client id
            InvalidUserTypeError: The id belongs to a volunteer
            ProfileIncompleteError: The client hasn't finished the questionnaire
            InsufficientCandidatesError: No volunteer passes the criteria
        """
        criteria = criteria or MatchingCriteria()
        client = self._get(client_id)

        if not client.is_client:
            raise InvalidUserTypeError(f"{client_id} is not a client")
        if not client.has_complete_profile:
            raise ProfileIncompleteError(f"Client {client_id} has not completed the profile quiz")

        candidates = [v for v in self.store.list_volunteers() if criteria.matches(v)]
        if not candidates:
            raise InsufficientCandidatesError("No volunteers match the requested criteria")

        matches = self.engine.find_matches(client, candidates)
        return [m for m in matches if m.score >= criteria.min_match_score]

    def assign_volunteer(self, client_id: str, volunteer_id: str) -> None:
        """Match a client with a volunteer, updating both records together.

        Raises:
            PersonNotFoundError: Either id is unknown
            InvalidUserTypeError: The roles are wrong
            VersionConflictError: A record changed concurrently
        """
        client = self._get(client_id)
        volunteer = self._get(volunteer_id)

        if not client.is_client or not volunteer.is_volunteer:
            raise InvalidUserTypeError(
                f"Expected client/volunteer, got {client.user_type.value}/{volunteer.user_type.value}"
            )

        updates = [client.with_volunteer(volunteer.id)]
        updated_volunteer = volunteer.with_client(client.id)
        if updated_volunteer is not volunteer:
            updates.append(updated_volunteer)

        self.store.update_many(updates)
        logger.info(f"Assigned volunteer {volunteer_id} to client {client_id}")

"""Exceptions raised by the matching service and the person store."""


class MatchingError(Exception):
    """Base class for all MentorMatch errors."""


class PersonNotFoundError(MatchingError):
    """No record exists for the requested id."""

    def __init__(self, person_id: str):
        super().__init__(f"Person not found: {person_id}")
        self.person_id = person_id


class VersionConflictError(MatchingError):
    """A write was based on a stale copy of the record."""

    def __init__(self, person_id: str, expected: int, actual: int):
        super().__init__(
            f"Version conflict for {person_id}: expected {expected}, found {actual}"
        )
        self.person_id = person_id
        self.expected = expected
        self.actual = actual


class DuplicateEmailError(MatchingError):
    """Another record already uses this email address."""


class InvalidUserTypeError(MatchingError):
    """The record has the wrong role for the requested operation."""


class ProfileIncompleteError(MatchingError):
    """The client has not finished the compatibility questionnaire."""


class InsufficientCandidatesError(MatchingError):
    """No volunteer is available for the requested match query."""

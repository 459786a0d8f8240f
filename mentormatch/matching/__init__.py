"""Matching module: eligibility filtering, compatibility scoring and assignment."""

from mentormatch.matching.batch import (
    ApplyReport,
    BatchAssignment,
    BatchMatchingResult,
    BatchMatchingService,
    MatchingConfig,
    VolunteerSlot,
)
from mentormatch.matching.eligibility import (
    EligibilityConfig,
    EligibilityFilter,
    EligibilityOutcome,
    EligibilityReason,
)
from mentormatch.matching.engine import MatchingEngine, MatchResult
from mentormatch.matching.hungarian import Assignment, HungarianSolver, SolverMode
from mentormatch.matching.scorer import CompatibilityBreakdown, CompatibilityScorer
from mentormatch.matching.service import MatchingCriteria, MatchingService

__all__ = [
    "ApplyReport",
    "Assignment",
    "BatchAssignment",
    "BatchMatchingResult",
    "BatchMatchingService",
    "CompatibilityBreakdown",
    "CompatibilityScorer",
    "EligibilityConfig",
    "EligibilityFilter",
    "EligibilityOutcome",
    "EligibilityReason",
    "HungarianSolver",
    "MatchingConfig",
    "MatchingCriteria",
    "MatchingEngine",
    "MatchingService",
    "MatchResult",
    "SolverMode",
    "VolunteerSlot",
]

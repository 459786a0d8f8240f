"""Batch matching pipeline.

Runs the three stages over a snapshot of clients and volunteers:
1. Hard filtering (EligibilityFilter)
2. Weighted compatibility scoring (CompatibilityScorer)
3. Global assignment (HungarianSolver) over volunteer capacity slots

The result is a plain value; writing it back to the store is a separate,
explicit ``apply`` step.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from pydantic import BaseModel, Field, model_validator

from mentormatch.errors import PersonNotFoundError, VersionConflictError
from mentormatch.matching.eligibility import EligibilityConfig, EligibilityFilter
from mentormatch.matching.hungarian import HungarianSolver, SolverMode
from mentormatch.matching.scorer import CompatibilityScorer
from mentormatch.profile.models import Person
from mentormatch.storage.store import PersonStore

logger = logging.getLogger(__name__)

# Below any real score, so the solver prefers an eligible 0.0 pair over an ineligible cell
INELIGIBLE_SCORE = -1.0


class MatchingConfig(BaseModel):
    """Settings for a batch matching run."""

    max_clients_per_volunteer: int = Field(3, ge=0)
    min_score: float = Field(0.0, ge=0.0, le=1.0)
    solver_mode: SolverMode = SolverMode.OPTIMAL
    eligibility: EligibilityConfig = Field(default_factory=EligibilityConfig)

    @model_validator(mode="after")
    def _check_capacity_limits(self) -> "MatchingConfig":
        # The batch applies the top-level limit to the eligibility rules too
        nested = self.eligibility
        if ("max_clients_per_volunteer" in nested.model_fields_set
                and nested.max_clients_per_volunteer != self.max_clients_per_volunteer):
            raise ValueError(
                f"eligibility.max_clients_per_volunteer ({nested.max_clients_per_volunteer}) "
                f"conflicts with max_clients_per_volunteer ({self.max_clients_per_volunteer})"
            )
        return self


@dataclass(frozen=True)
class VolunteerSlot:
    """One unit of a volunteer's remaining capacity."""
    volunteer_id: str
    slot_index: int


@dataclass(frozen=True)
class BatchAssignment:
    """An accepted client-volunteer pairing."""
    client_id: str
    volunteer_id: str
    score: float
    slot_index: int     # Which slot of the volunteer (for capacity > 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "client_id": self.client_id,
            "volunteer_id": self.volunteer_id,
            "score": round(self.score, 4),
            "slot_index": self.slot_index,
        }


@dataclass
class BatchMatchingResult:
    """Outcome of one batch run."""
    assignments: List[BatchAssignment] = field(default_factory=list)
    unassigned_client_ids: List[str] = field(default_factory=list)
    total_score: float = 0.0
    max_clients_per_volunteer: int = 3

    @property
    def assigned_client_ids(self) -> List[str]:
        return [a.client_id for a in self.assignments]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "assignments": [a.to_dict() for a in self.assignments],
            "unassigned_client_ids": list(self.unassigned_client_ids),
            "total_score": round(self.total_score, 4),
        }


@dataclass
class SkippedAssignment:
    """An assignment that ``apply`` could not write."""
    assignment: BatchAssignment
    reason: str


@dataclass
class ApplyReport:
    """What ``apply`` wrote and what it skipped."""
    applied: List[BatchAssignment] = field(default_factory=list)
    skipped: List[SkippedAssignment] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "applied": [a.to_dict() for a in self.applied],
            "skipped": [
                {**s.assignment.to_dict(), "reason": s.reason} for s in self.skipped
            ],
        }


class BatchMatchingService:
    """Three-stage batch matcher with capacity-aware slot expansion."""

    def __init__(
        self,
        config: Optional[MatchingConfig] = None,
        eligibility_filter: Optional[EligibilityFilter] = None,
        scorer: Optional[CompatibilityScorer] = None,
        solver: Optional[HungarianSolver] = None
    ):
        self.config = config or MatchingConfig()
        self.eligibility_filter = eligibility_filter or EligibilityFilter(self.config.eligibility)
        self.scorer = scorer or CompatibilityScorer()
        self.solver = solver or HungarianSolver(self.config.solver_mode)

    def run_batch(
        self,
        clients: Sequence[Person],
        volunteers: Sequence[Person],
        max_clients_per_volunteer: Optional[int] = None,
        min_score: Optional[float] = None
    ) -> BatchMatchingResult:
        """Compute optimal assignments for a snapshot.

        Args:
            clients: Clients in a stable order; already-matched ones are ignored
            volunteers: Volunteers in a stable order
            max_clients_per_volunteer: Overrides the configured capacity limit
            min_score: Overrides the configured minimum acceptable score

        Returns:
            BatchMatchingResult; never raises for empty inputs
        """
        if max_clients_per_volunteer is None:
            max_clients_per_volunteer = self.config.max_clients_per_volunteer
        if min_score is None:
            min_score = self.config.min_score

        unmatched = [c for c in clients if c.matched_volunteer_id is None]

        if not unmatched or not volunteers:
            logger.info(
                f"Nothing to match: {len(unmatched)} unmatched clients, "
                f"{len(volunteers)} volunteers"
            )
            return BatchMatchingResult(
                unassigned_client_ids=[c.id for c in unmatched],
                max_clients_per_volunteer=max_clients_per_volunteer,
            )

        # STAGE 1: Hard filtering
        eligible_pairs = self._filter_pairs(unmatched, volunteers, max_clients_per_volunteer)

        # STAGE 2: Scoring over capacity slots
        slots = self._expand_slots(volunteers, max_clients_per_volunteer)
        matrix = self._build_score_matrix(unmatched, volunteers, slots, eligible_pairs)

        # STAGE 3: Global assignment
        assignments: List[BatchAssignment] = []
        if slots:
            for row, col in self.solver.solve(matrix, maximize=True):
                volunteer_idx, slot = slots[col]
                if (row, volunteer_idx) not in eligible_pairs:
                    continue
                score = matrix[row][col]
                if score < min_score:
                    continue
                assignments.append(BatchAssignment(
                    client_id=unmatched[row].id,
                    volunteer_id=slot.volunteer_id,
                    score=score,
                    slot_index=slot.slot_index,
                ))

        assigned = {a.client_id for a in assignments}
        unassigned = [c.id for c in unmatched if c.id not in assigned]
        total_score = sum(a.score for a in assignments)

        logger.info(
            f"Batch matched {len(assignments)}/{len(unmatched)} clients "
            f"across {len(slots)} slots, total score {total_score:.3f}"
        )

        return BatchMatchingResult(
            assignments=assignments,
            unassigned_client_ids=unassigned,
            total_score=total_score,
            max_clients_per_volunteer=max_clients_per_volunteer,
        )

    def _filter_pairs(
        self,
        clients: Sequence[Person],
        volunteers: Sequence[Person],
        max_clients_per_volunteer: int
    ) -> Set[Tuple[int, int]]:
        """Return (client index, volunteer index) pairs that pass every hard rule."""
        config = self.eligibility_filter.config.model_copy(
            update={"max_clients_per_volunteer": max_clients_per_volunteer}
        )

        eligible: Set[Tuple[int, int]] = set()
        for client_idx, client in enumerate(clients):
            for volunteer_idx, volunteer in enumerate(volunteers):
                outcome = self.eligibility_filter.evaluate(client, volunteer, config)
                if outcome.passed:
                    eligible.add((client_idx, volunteer_idx))
                else:
                    logger.debug(
                        f"Pair {client.id}/{volunteer.id} rejected: {outcome.reason.value}"
                    )

        logger.info(
            f"Hard filter kept {len(eligible)}/{len(clients) * len(volunteers)} pairs"
        )
        return eligible

    def _expand_slots(
        self,
        volunteers: Sequence[Person],
        max_clients_per_volunteer: int
    ) -> List[Tuple[int, VolunteerSlot]]:
        """One slot per unit of remaining capacity, tagged with the volunteer index."""
        slots = []
        for volunteer_idx, volunteer in enumerate(volunteers):
            for slot_index in range(volunteer.remaining_capacity(max_clients_per_volunteer)):
                slots.append((volunteer_idx, VolunteerSlot(volunteer.id, slot_index)))
        return slots

    def _build_score_matrix(
        self,
        clients: Sequence[Person],
        volunteers: Sequence[Person],
        slots: List[Tuple[int, VolunteerSlot]],
        eligible_pairs: Set[Tuple[int, int]]
    ) -> List[List[float]]:
        """Rows are clients, columns are slots; ineligible cells hold INELIGIBLE_SCORE."""
        # Each pair is scored once and shared by all of the volunteer's slots
        pair_scores: Dict[Tuple[int, int], float] = {
            (client_idx, volunteer_idx): self.scorer.score(
                clients[client_idx], volunteers[volunteer_idx]
            )
            for client_idx, volunteer_idx in sorted(eligible_pairs)
        }

        matrix = [[INELIGIBLE_SCORE] * len(slots) for _ in clients]
        for col, (volunteer_idx, _) in enumerate(slots):
            for row in range(len(clients)):
                score = pair_scores.get((row, volunteer_idx))
                if score is not None:
                    matrix[row][col] = score
        return matrix

    # Applying results

    def apply(self, result: BatchMatchingResult, store: PersonStore) -> ApplyReport:
        """Write accepted assignments to the store.

        Each assignment updates the client and the volunteer together through
        ``store.update_many``. Missing records and write conflicts are
        recorded in the report and the remaining assignments still run.
        """
        report = ApplyReport()

        for assignment in result.assignments:
            reason = self._apply_one(assignment, store, result.max_clients_per_volunteer)
            if reason is None:
                report.applied.append(assignment)
            else:
                logger.warning(
                    f"Skipped assignment {assignment.client_id} -> "
                    f"{assignment.volunteer_id}: {reason}"
                )
                report.skipped.append(SkippedAssignment(assignment, reason))

        logger.info(
            f"Applied {len(report.applied)} assignments, skipped {len(report.skipped)}"
        )
        return report

    def _apply_one(
        self,
        assignment: BatchAssignment,
        store: PersonStore,
        max_clients_per_volunteer: int
    ) -> Optional[str]:
        """Apply one assignment; returns a skip reason or None on success."""
        client = store.get(assignment.client_id)
        if client is None:
            return f"client not found: {assignment.client_id}"
        volunteer = store.get(assignment.volunteer_id)
        if volunteer is None:
            return f"volunteer not found: {assignment.volunteer_id}"

        if client.matched_volunteer_id not in (None, volunteer.id):
            return f"client already matched to {client.matched_volunteer_id}"

        holds_client = client.id in volunteer.matched_client_ids
        if client.matched_volunteer_id == volunteer.id and holds_client:
            return None

        if not holds_client and volunteer.remaining_capacity(max_clients_per_volunteer) == 0:
            return "volunteer at capacity"

        updates = [client.with_volunteer(volunteer.id)]
        if not holds_client:
            updates.append(volunteer.with_client(client.id))

        try:
            store.update_many(updates)
        except (PersonNotFoundError, VersionConflictError) as e:
            return str(e)
        return None

    def run_from_store(
        self,
        store: PersonStore,
        apply: bool = False
    ) -> Tuple[BatchMatchingResult, Optional[ApplyReport]]:
        """Run a batch over the store's current unmatched clients and volunteers."""
        result = self.run_batch(
            store.list_clients(unmatched_only=True),
            store.list_volunteers(),
        )
        report = self.apply(result, store) if apply else None
        return result, report

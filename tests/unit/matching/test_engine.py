"""Tests for single-client match ranking."""

from mentormatch.matching.engine import MatchingEngine, MatchResult
from mentormatch.profile.models import MentorType, PriorityValue
from tests.factories import TableScorer, make_client, make_quiz, make_volunteer


class TestMatchResult:
    def test_compatibility_levels(self, volunteer):
        levels = {
            score: MatchResult(volunteer, score).compatibility_level
            for score in (0.95, 0.8, 0.6, 0.45, 0.1)
        }
        assert levels == {0.95: "Excellent", 0.8: "Excellent", 0.6: "Good", 0.45: "Fair", 0.1: "Low"}

    def test_is_good_match(self, volunteer):
        assert MatchResult(volunteer, 0.6).is_good_match
        assert not MatchResult(volunteer, 0.59).is_good_match

    def test_to_dict(self, volunteer):
        assert MatchResult(volunteer, 0.8123).to_dict() == {
            "volunteer_id": "victor",
            "volunteer_name": "victor",
            "score": 0.812,
            "level": "Excellent",
        }


class TestMatchingEngine:
    def test_ranks_by_score(self, client):
        volunteers = [
            make_volunteer("partial", quiz=make_quiz(mentor_type=MentorType.JUST_CONSISTENT)),
            make_volunteer("exact"),
            make_volunteer("weak", quiz=make_quiz(
                mentor_type=MentorType.JUST_CONSISTENT,
                priority_value=PriorityValue.STABLE_HOUSING,
            )),
        ]
        matches = MatchingEngine().find_matches(client, volunteers)
        assert [m.volunteer.id for m in matches] == ["exact", "partial", "weak"]
        assert matches[0].score > matches[1].score > matches[2].score

    def test_ties_keep_candidate_order(self, client):
        volunteers = [make_volunteer(f"v{i}") for i in range(4)]
        engine = MatchingEngine(scorer=TableScorer({}, default=0.7))
        matches = engine.find_matches(client, volunteers)
        assert [m.volunteer.id for m in matches] == ["v0", "v1", "v2", "v3"]

    def test_incomplete_client_gets_nothing(self, volunteer):
        client = make_client("c", quiz=make_quiz(barriers=[]))
        assert MatchingEngine().find_matches(client, [volunteer]) == []

    def test_volunteer_passed_as_client_gets_nothing(self, volunteer):
        assert MatchingEngine().find_matches(volunteer, [make_volunteer("v2")]) == []

    def test_skips_unavailable_volunteers(self, client):
        volunteers = [
            make_volunteer("incomplete", quiz=make_quiz(advice_style=None)),
            make_volunteer("holding", matched_client_ids=[client.id]),
            make_volunteer("full", capacity=1, matched_client_ids=["someone"]),
            make_client("not-a-volunteer"),
            make_volunteer("ok"),
        ]
        matches = MatchingEngine().find_matches(client, volunteers)
        assert [m.volunteer.id for m in matches] == ["ok"]

"""Unit tests for watcher reports."""
import pytest
from datetime import timedelta

from convention_voting.core.exceptions import ConflictError, NotFoundError
from convention_voting.services.watcher import (
    get_watcher_meeting_report,
    get_watcher_meetings,
    get_watcher_motion_detail,
    get_watcher_motion_result,
    get_watcher_motion_voters,
)
from tests import utils


@pytest.mark.unit
class TestMotionResult:

    def test_rejected_while_voting(self, db_session, active_motion):
        with pytest.raises(ConflictError) as exc_info:
            get_watcher_motion_result(db_session, active_motion.id)
        assert exc_info.value.reason == "not_completed"
        assert "Results are only available" in exc_info.value.message

    def test_rejected_before_voting(self, db_session, motion):
        with pytest.raises(ConflictError):
            get_watcher_motion_result(db_session, motion.id)

    def test_completed_motion(self, db_session, voter, other_voter, active_motion, now):
        a, b = active_motion.choices
        utils.record_vote(db_session, voter, active_motion, [b])
        utils.record_vote(db_session, other_voter, active_motion, [b])
        utils.complete_motion(db_session, active_motion, now)

        result = get_watcher_motion_result(db_session, active_motion.id)

        assert result["total_votes"] == 2
        assert result["choices"][0]["choice_name"] == "B"
        assert result["choices"][0]["is_winner"] is True
        assert result["choices"][1]["vote_count"] == 0

    def test_missing_motion(self, db_session):
        with pytest.raises(NotFoundError):
            get_watcher_motion_result(db_session, 404)


@pytest.mark.unit
class TestMotionVoters:

    def test_names_without_choices(self, db_session, voter, other_voter, active_motion, now):
        utils.record_vote(db_session, voter, active_motion, active_motion.choices[:1])
        utils.record_vote(db_session, other_voter, active_motion, [], abstain=True)
        utils.complete_motion(db_session, active_motion, now)

        voters = get_watcher_motion_voters(db_session, active_motion.id)

        assert [(v["first_name"], v["last_name"]) for v in voters] == [("Grace", "Hopper"), ("Ada", "Lovelace")]
        assert set(voters[0]) == {"first_name", "last_name", "voted_at"}

    def test_rejected_while_voting(self, db_session, active_motion):
        with pytest.raises(ConflictError, match="Voter list is only available"):
            get_watcher_motion_voters(db_session, active_motion.id)


@pytest.mark.unit
class TestMeetingReports:

    def test_summaries_only_include_results_when_complete(self, db_session, voter, meeting, active_motion, now):
        done = utils.create_motion(db_session, meeting, name="Done")
        (yes,) = utils.create_choices(db_session, done, ["Yes"])
        utils.start_motion(db_session, done, now - timedelta(minutes=30))
        utils.record_vote(db_session, voter, done, [yes])
        utils.record_vote(db_session, voter, active_motion, [], abstain=True)
        utils.complete_motion(db_session, done, now - timedelta(minutes=15))

        report = get_watcher_meeting_report(db_session, meeting.id)
        summaries = {s["motion_name"]: s for s in report["motion_summaries"]}

        assert report["quorum_pool_name"] == "Delegates"
        assert summaries["Adopt the agenda"]["result"] is None
        assert summaries["Adopt the agenda"]["total_abstentions"] == 1
        assert summaries["Done"]["total_votes_cast"] == 1
        assert summaries["Done"]["result"]["choices"][0]["is_winner"] is True

    def test_list_meetings(self, db_session, meeting):
        reports, total = get_watcher_meetings(db_session)
        assert total == 1
        assert reports[0]["meeting_id"] == meeting.id

    def test_missing_meeting(self, db_session):
        with pytest.raises(NotFoundError):
            get_watcher_meeting_report(db_session, 404)


@pytest.mark.unit
class TestMotionDetail:

    def test_active_motion(self, db_session, voter, other_voter, active_motion, now):
        utils.record_vote(db_session, voter, active_motion, [], abstain=True)

        detail = get_watcher_motion_detail(db_session, active_motion.id, now)

        assert detail["status"] == "voting_active"
        assert detail["eligible_voter_count"] == 2
        assert detail["total_votes_cast"] == 1
        assert detail["time_remaining"] == "9m 0s"
        assert detail["result"] is None

    def test_not_started_hides_vote_count(self, db_session, motion, now):
        detail = get_watcher_motion_detail(db_session, motion.id, now)
        assert detail["total_votes_cast"] is None
        assert detail["voting_ends_at"] is None

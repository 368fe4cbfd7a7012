"""Unit tests for the motion lifecycle and choice management."""
import pytest
from datetime import timedelta
from unittest.mock import patch

from convention_voting.core.constants import MotionStatus
from convention_voting.core.exceptions import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from convention_voting.core.utils import to_utc
from convention_voting.services.motion import (
    check_status_transition,
    create_choice,
    create_motion,
    delete_choice,
    list_choices,
    reorder_choices,
    set_motion_end_override,
    update_choice,
    update_motion,
    update_motion_status,
)
from tests import utils


@pytest.mark.unit
class TestCheckStatusTransition:

    @pytest.mark.parametrize("current,requested", [
        ("not_yet_started", "voting_active"),
        ("voting_active", "voting_complete"),
    ])
    def test_forward_steps_allowed(self, current, requested):
        check_status_transition(current, requested)

    @pytest.mark.parametrize("current,requested", [
        ("not_yet_started", "voting_complete"),
        ("not_yet_started", "not_yet_started"),
        ("voting_active", "not_yet_started"),
        ("voting_active", "voting_active"),
        ("voting_complete", "voting_active"),
        ("voting_complete", "not_yet_started"),
    ])
    def test_other_moves_rejected(self, current, requested):
        with pytest.raises(InvalidTransitionError) as exc_info:
            check_status_transition(current, requested)
        assert exc_info.value.status_code == 409
        assert f"from '{current}' to '{requested}'" in exc_info.value.message

    def test_unknown_status(self):
        with pytest.raises(ValidationError):
            check_status_transition("not_yet_started", "paused")


@pytest.mark.unit
class TestUpdateMotionStatus:

    def test_start_stamps_voting_started_at(self, db_session, motion, now):
        result = update_motion_status(db_session, motion.id, "voting_active", now)
        assert result.status == MotionStatus.VOTING_ACTIVE
        assert to_utc(result.voting_started_at) == now
        assert result.voting_ended_at is None

    def test_start_with_end_override(self, db_session, motion, now):
        override = now + timedelta(minutes=3)
        result = update_motion_status(db_session, motion.id, "voting_active", now, end_override=override)
        assert to_utc(result.end_override) == override

    def test_complete_stamps_voting_ended_at(self, db_session, active_motion, now):
        later = now + timedelta(minutes=12)
        result = update_motion_status(db_session, active_motion.id, MotionStatus.VOTING_COMPLETE, later)
        assert result.status == MotionStatus.VOTING_COMPLETE
        assert to_utc(result.voting_ended_at) == later
        assert to_utc(result.voting_started_at) == now - timedelta(minutes=1)

    def test_completed_motion_cannot_reopen(self, db_session, active_motion, now):
        utils.complete_motion(db_session, active_motion, now)
        with pytest.raises(InvalidTransitionError):
            update_motion_status(db_session, active_motion.id, "voting_active", now)

    def test_skipping_a_step_rejected(self, db_session, motion, now):
        with pytest.raises(InvalidTransitionError):
            update_motion_status(db_session, motion.id, "voting_complete", now)

    def test_end_override_only_when_starting(self, db_session, active_motion, now):
        with pytest.raises(InvalidTransitionError, match="end_override"):
            update_motion_status(
                db_session, active_motion.id, "voting_complete", now,
                end_override=now + timedelta(minutes=5),
            )

    def test_missing_motion(self, db_session, now):
        with pytest.raises(NotFoundError):
            update_motion_status(db_session, 999, "voting_active", now)

    def test_lost_race_is_a_conflict(self, db_session, motion, now):
        # Simulate another admin moving the motion between read and write
        with patch("sqlalchemy.orm.Query.update", return_value=0):
            with pytest.raises(ConflictError):
                update_motion_status(db_session, motion.id, "voting_active", now)


@pytest.mark.unit
class TestEndOverride:

    def test_set_and_clear(self, db_session, active_motion, now):
        override = now + timedelta(minutes=30)
        result = set_motion_end_override(db_session, active_motion.id, override, now)
        assert to_utc(result.end_override) == override

        result = set_motion_end_override(db_session, active_motion.id, None, now)
        assert result.end_override is None

    def test_rejected_unless_active(self, db_session, motion, now):
        with pytest.raises(InvalidTransitionError):
            set_motion_end_override(db_session, motion.id, now + timedelta(minutes=5), now)

    def test_missing_motion(self, db_session, now):
        with pytest.raises(NotFoundError):
            set_motion_end_override(db_session, 999, now, now)


@pytest.mark.unit
class TestMotionCrud:

    def test_create_motion(self, db_session, meeting):
        motion = create_motion(db_session, meeting.id, "Elect a chair", 15, seat_count=1)
        assert motion.id is not None
        assert motion.status == MotionStatus.NOT_YET_STARTED

    def test_create_motion_unknown_meeting(self, db_session):
        with pytest.raises(NotFoundError):
            create_motion(db_session, 404, "Orphan", 10)

    def test_create_motion_unknown_pool(self, db_session, meeting):
        with pytest.raises(NotFoundError):
            create_motion(db_session, meeting.id, "Orphan", 10, voting_pool_id=404)

    @pytest.mark.parametrize("duration,seats", [(0, 1), (10, 0)])
    def test_create_motion_rejects_bad_numbers(self, db_session, meeting, duration, seats):
        with pytest.raises(ValidationError):
            create_motion(db_session, meeting.id, "Bad", duration, seat_count=seats)

    def test_update_ignores_status(self, db_session, motion):
        with pytest.raises(ValidationError, match="No fields to update"):
            update_motion(db_session, motion.id, status="voting_complete")

    def test_update_fields(self, db_session, motion):
        result = update_motion(db_session, motion.id, name="Renamed", seat_count=2)
        assert result.name == "Renamed"
        assert result.seat_count == 2


@pytest.mark.unit
class TestChoices:

    def test_create_appends_after_last(self, db_session, motion):
        choice = create_choice(db_session, motion.id, "C")
        assert choice.sort_order == 2

    def test_create_first_choice(self, db_session, meeting):
        empty = utils.create_motion(db_session, meeting)
        choice = create_choice(db_session, empty.id, "Only")
        assert choice.sort_order == 0

    def test_locked_after_voting_starts(self, db_session, active_motion):
        with pytest.raises(ConflictError) as exc_info:
            create_choice(db_session, active_motion.id, "Late entry")
        assert exc_info.value.reason == "choices_locked"

    def test_update_locked_after_voting_starts(self, db_session, active_motion):
        choice = active_motion.choices[0]
        with pytest.raises(ConflictError):
            update_choice(db_session, choice.id, name="Changed")

    def test_update_name(self, db_session, motion):
        choice = motion.choices[0]
        assert update_choice(db_session, choice.id, name="Alpha").name == "Alpha"

    def test_reorder(self, db_session, motion):
        a, b = motion.choices
        result = reorder_choices(db_session, motion.id, [b.id, a.id])
        assert [c.name for c in result] == ["B", "A"]
        assert [c.sort_order for c in result] == [0, 1]

    def test_reorder_requires_every_choice(self, db_session, motion):
        with pytest.raises(ValidationError):
            reorder_choices(db_session, motion.id, [motion.choices[0].id])

    def test_reorder_rejects_duplicates(self, db_session, motion):
        a, b = motion.choices
        with pytest.raises(ValidationError):
            reorder_choices(db_session, motion.id, [a.id, a.id])

    def test_delete_closes_gap(self, db_session, motion):
        create_choice(db_session, motion.id, "C")
        first = list_choices(db_session, motion.id)[0]

        delete_choice(db_session, first.id)

        remaining = list_choices(db_session, motion.id)
        assert [(c.name, c.sort_order) for c in remaining] == [("B", 0), ("C", 1)]

    def test_delete_missing_choice(self, db_session):
        with pytest.raises(NotFoundError):
            delete_choice(db_session, 404)

    def test_create_at_taken_position_shifts_others(self, db_session, motion):
        create_choice(db_session, motion.id, "Dup", sort_order=0)

        choices = list_choices(db_session, motion.id)
        assert [(c.name, c.sort_order) for c in choices] == [("Dup", 0), ("A", 1), ("B", 2)]

    def test_create_past_end_is_clamped(self, db_session, motion):
        choice = create_choice(db_session, motion.id, "Far", sort_order=99)
        assert choice.sort_order == 2

    def test_update_to_taken_position_moves_choice(self, db_session, motion):
        a, b = motion.choices
        update_choice(db_session, b.id, sort_order=a.sort_order)

        choices = list_choices(db_session, motion.id)
        assert [(c.name, c.sort_order) for c in choices] == [("B", 0), ("A", 1)]

    def test_update_negative_position_is_clamped(self, db_session, motion):
        create_choice(db_session, motion.id, "C")
        c = list_choices(db_session, motion.id)[-1]

        update_choice(db_session, c.id, sort_order=-5)

        choices = list_choices(db_session, motion.id)
        assert [c.name for c in choices] == ["C", "A", "B"]
        assert [c.sort_order for c in choices] == [0, 1, 2]

    def test_reorder_locked_after_voting_starts(self, db_session, active_motion):
        a, b = active_motion.choices
        with pytest.raises(ConflictError) as exc_info:
            reorder_choices(db_session, active_motion.id, [b.id, a.id])
        assert exc_info.value.reason == "choices_locked"

    def test_delete_locked_after_voting_starts(self, db_session, active_motion):
        choice = active_motion.choices[0]
        with pytest.raises(ConflictError) as exc_info:
            delete_choice(db_session, choice.id)
        assert exc_info.value.reason == "choices_locked"
        assert len(list_choices(db_session, active_motion.id)) == 2

from .activity import log_activity, record_activity_safely
from .eligibility import evaluate_eligibility, get_motion_for_voting, get_open_motions_for_user
from .meeting import create_meeting, delete_meeting, get_meeting, list_meetings, update_meeting
from .motion import (
    check_status_transition,
    create_choice,
    create_motion,
    delete_choice,
    delete_motion,
    ensure_choices_mutable,
    get_motion,
    list_choices,
    list_motions_for_meeting,
    reorder_choices,
    set_motion_end_override,
    update_choice,
    update_motion,
    update_motion_status,
)
from .quorum import call_quorum, get_active_voters_for_quorum, get_quorum_report
from .tally import rank_choices, tally_motion
from .time_window import compute_window, format_duration, format_remaining, voting_ends_at
from .vote import cast_vote, get_user_vote
from .vote_validator import validate_vote
from .watcher import (
    get_watcher_meeting_report,
    get_watcher_meetings,
    get_watcher_motion_detail,
    get_watcher_motion_result,
    get_watcher_motion_voters,
    get_watcher_quorum_report,
    get_watcher_quorum_voters,
)

__all__ = [
    # time window
    "compute_window",
    "format_duration",
    "format_remaining",
    "voting_ends_at",
    # eligibility
    "evaluate_eligibility",
    "get_motion_for_voting",
    "get_open_motions_for_user",
    # votes
    "validate_vote",
    "cast_vote",
    "get_user_vote",
    # lifecycle and admin
    "check_status_transition",
    "update_motion_status",
    "set_motion_end_override",
    "create_motion",
    "get_motion",
    "list_motions_for_meeting",
    "update_motion",
    "delete_motion",
    "ensure_choices_mutable",
    "create_choice",
    "list_choices",
    "update_choice",
    "reorder_choices",
    "delete_choice",
    "create_meeting",
    "get_meeting",
    "list_meetings",
    "update_meeting",
    "delete_meeting",
    # results and quorum
    "rank_choices",
    "tally_motion",
    "get_quorum_report",
    "call_quorum",
    "get_active_voters_for_quorum",
    # watcher
    "get_watcher_meetings",
    "get_watcher_meeting_report",
    "get_watcher_quorum_report",
    "get_watcher_quorum_voters",
    "get_watcher_motion_result",
    "get_watcher_motion_voters",
    "get_watcher_motion_detail",
    # activity
    "log_activity",
    "record_activity_safely",
]

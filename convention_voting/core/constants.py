"""Application constants.

Motion statuses, eligibility reason codes and the numeric limits shared by
the voting, tally and quorum services live here so that every call site
compares against the same values.
"""
import enum


class MotionStatus(str, enum.Enum):
    """Lifecycle of a motion. Forward-only, terminal at VOTING_COMPLETE."""

    NOT_YET_STARTED = "not_yet_started"
    VOTING_ACTIVE = "voting_active"
    VOTING_COMPLETE = "voting_complete"


class IneligibilityReason(str, enum.Enum):
    """Why a user cannot vote on a motion right now.

    Declaration order is evaluation order: the first matching reason wins.
    """

    ALREADY_VOTED = "already_voted"
    NOT_IN_POOL = "not_in_pool"
    NOT_ACTIVE = "not_active"
    VOTING_ENDED = "voting_ended"


# Allowed next states for each status
VALID_STATUS_TRANSITIONS = {
    MotionStatus.NOT_YET_STARTED: frozenset({MotionStatus.VOTING_ACTIVE}),
    MotionStatus.VOTING_ACTIVE: frozenset({MotionStatus.VOTING_COMPLETE}),
    MotionStatus.VOTING_COMPLETE: frozenset(),
}

# Motion defaults
DEFAULT_SEAT_COUNT = 1
INITIAL_SORT_ORDER = 0

# Countdown is flagged urgent below this many minutes remaining
URGENT_THRESHOLD_MINUTES = 5

# Activity log url_path column width
MAX_ACTIVITY_PATH_LENGTH = 500

# Column widths
MAX_NAME_LENGTH = 255

# Pagination
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200

# JWT Token Configuration
# Token expiration time in minutes (24 hours, matches the identity service)
ACCESS_TOKEN_EXPIRE_MINUTES = 1440

"""Ballot validation. Pure checks over an already-loaded motion."""
from typing import Iterable, List, Sequence

from convention_voting.core.exceptions import ValidationError


def validate_vote(
    seat_count: int,
    motion_choice_ids: Iterable[int],
    choice_ids: Sequence[int],
    abstain: bool,
) -> List[int]:
    """Check a ballot against the motion's seat count and choices.

    Returns the selected choice ids in submission order with duplicates
    removed. Raises ValidationError on the first rule that fails; nothing
    is written either way.
    """
    selected = list(dict.fromkeys(choice_ids))

    if abstain and selected:
        raise ValidationError("Cannot select choices when abstaining")

    if not abstain and not selected:
        raise ValidationError("Must select at least one choice or abstain")

    if len(selected) > seat_count:
        raise ValidationError(f"You can only select up to {seat_count} choice(s)")

    valid_ids = set(motion_choice_ids)
    if any(choice_id not in valid_ids for choice_id in selected):
        raise ValidationError("Invalid choice selection")

    return selected

"""Convention voting service: motion voting windows, ballots, tallies and quorum."""

"""ClawJoke Stage: joke board API with a vote ledger and admin moderation."""

"""HTTP API for ClawJoke Stage."""

"""Online voting portal with a race-safe vote-integrity core."""

__version__ = "0.1.0"

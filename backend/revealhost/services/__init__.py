"""Host domain services: round store, scoreboard and the presentation engine.

This package contains pure(ish) domain logic that should be imported by
HTTP routes and socket handlers, keeping transport concerns separated
from the presentation mechanics.
"""

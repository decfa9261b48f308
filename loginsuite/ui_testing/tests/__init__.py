"""Live UI tests (opt-in with UI_LIVE=1)."""

"""
UI testing: framework (sessions, waits, interactions, evidence), page objects
and live browser tests.
"""

"""
Connect Client - async client for session-authenticated XML-over-HTTP APIs.

Dispatches named actions, keeps the login session, classifies every reply
into a status envelope and rolls back compound mutations whose result
cannot be used.
"""

__version__ = "1.0.0"

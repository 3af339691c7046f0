"""Maitre — authentication and role-gated access for restaurant backends.

Issues and verifies signed session tokens for a multi-restaurant system,
guards privileged routes by role, and ships the client-side session
manager that consumes those tokens.
"""

__version__ = "0.1.0"

"""
burgerhero.auth

Authentication/authorization package.

Responsibilities:
- Identity domain types (role, session, user profile).
- Session token decoding.
- Role-gated navigation guard.
"""

# Package marker.

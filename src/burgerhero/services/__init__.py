"""
burgerhero.services

Service layer.

Responsibilities:
- Session bootstrap (session -> profile -> stores).
- Preference application and remote mirroring.
- Post-authentication navigation decisions.
"""

# Package marker.

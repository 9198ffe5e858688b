"""
burgerhero.api

HTTP API for the BurgerHero session service.

Responsibilities:
- FastAPI app factory and router modules.
- Error mapping and dependency wiring.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The API layer stays thin: request validation + delegation to stores/services.

"""
burgerhero.backend

HTTP clients for the hosted backend (Supabase GoTrue + PostgREST).

Responsibilities:
- Own the identity-provider session and publish auth events.
- Read/write profile rows and call the bootstrap stored procedure.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Both clients share one httpx.AsyncClient created by the app context; tests swap its
# transport for httpx.MockTransport.

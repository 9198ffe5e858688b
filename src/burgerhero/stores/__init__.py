"""
burgerhero.stores

Process-wide client state.

Responsibilities:
- Auth cache (current user + authenticated flag).
- Preference stores (theme, card customization) and the pending plan.
- Load once from local storage at startup; write back on every mutation.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Stores are plain objects owned by `burgerhero.context.AppContext`; nothing here is a
# module-level singleton, so tests build as many independent contexts as they need.

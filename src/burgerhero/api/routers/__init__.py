"""
burgerhero.api.routers

Router modules, one per client-facing concern.
"""

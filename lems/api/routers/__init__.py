"""
Division-scoped resource routers, mounted under ``/api/events/{division_id}``.
"""

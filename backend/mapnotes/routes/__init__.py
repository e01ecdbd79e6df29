# Routes package init
"""
Map Notes Backend — Routes Package

Modules:
    - notes: GET/POST /api/notes (and the /exec alias)
    - health: GET /health
"""

"""Infrastructure Layer — database sessions, logging, token and password crypto.

Invariants:
    - Infrastructure never imports from services/ or api/
    - All SQLAlchemy failures leave this layer as core.errors.DatabaseError
"""

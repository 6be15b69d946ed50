"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (user input, API responses)
    - Password hashes never appear in any response schema

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
    - from_attributes on response models: built straight from ORM rows
"""

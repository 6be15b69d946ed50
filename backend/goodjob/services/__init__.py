"""Services Layer — the async shell around the pure ledger rules.

Invariants:
    - Every service takes an AsyncSession in its constructor and owns no other state
    - Mutations run inside infrastructure.database.atomic()

Design Decisions:
    - One class per component (UserDirectory, GoodJobLedger, AuthService)
"""

"""Services Layer — the vehicle query engine over an async session.

Invariants:
    - Services receive their AsyncSession; they never create engines
    - Absence and duplicates are signalled with typed errors from core/errors.py
"""

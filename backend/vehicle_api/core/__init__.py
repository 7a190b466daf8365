"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, models/ or db/
    - All functions are pure and deterministic (the current year is an argument)

Design Decisions:
    - Functional core separated from imperative shell: VIN rules and pagination
      math are testable without a database
"""

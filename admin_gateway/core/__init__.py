"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Time is injected (clock callables), never read implicitly in comparisons

Design Decisions:
    - Functional core separated from imperative shell: sessions, cache and
      credentials are testable without a running server
"""

"""Admin Gateway Package — administrator sessions and request resilience for the CMS backend.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""

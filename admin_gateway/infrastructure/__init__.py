"""Infrastructure Layer — external service clients and cross-cutting concerns.

Invariants:
    - All outbound data service calls wrapped with retry and error mapping
    - SQL errors mapped to DatabaseError before leaving this layer
"""

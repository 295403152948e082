"""Services Layer — business logic implementations of core capability contracts.

Invariants:
    - Services import from core/ only
    - Concrete service types are constructed by the lifecycle manager, nobody else
"""

"""Infrastructure Layer — data access implementations and cross-cutting concerns.

Invariants:
    - Infrastructure imports from core/, db/ and models/ only
    - Every backend error is mapped to a core error before it leaves this layer
"""

"""Internal Package — everything behind the public entry points.

Invariants:
    - Nothing here is part of the public API; callers use `layered_echo` only
    - Modules here never import `layered_echo._lifecycle`, `layered_echo._config`
      or `layered_echo._wiring` (the dependency arrow points inward only)
    - Only the lifecycle manager (`_lifecycle.py`, `_wiring.py`) may import
      concrete types from services/ or infrastructure/

Design Decisions:
    - Leading-underscore package as the module boundary, checked by
      tests/architecture/test_dependency_direction.py
"""

"""Route Modules — one file per endpoint, each exporting a handler factory.

Invariants:
    - Factories take capability Protocols, never concrete types
    - Routes never contain business logic (delegate to the capability)
"""

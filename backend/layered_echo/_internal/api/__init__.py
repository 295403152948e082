"""API Layer — route table, handlers, error mapping and app assembly.

Invariants:
    - Imports from core/ and schemas/ only: handlers see capability Protocols,
      never services/ or infrastructure/ types
    - All endpoints return structured JSON responses

Design Decisions:
    - Thin routes delegate to capabilities
"""

"""Core Layer — value types, capability contracts, errors and the lifecycle state machine.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, db/ or models/
    - No IO: core defines contracts, the outer layers fulfil them

Design Decisions:
    - Functional core separated from imperative shell
"""

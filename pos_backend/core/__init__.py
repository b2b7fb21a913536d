# core/__init__.py
"""
CORE (LIFECYCLE INFRASTRUCTURE)

Shared building blocks for the order/return lifecycle:
- admission control (bounded concurrency)
- unit of work (atomic transaction boundary with timeouts)
- domain error taxonomy
- engine wiring used by the HTTP layer
"""

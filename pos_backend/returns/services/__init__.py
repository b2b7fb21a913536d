from .return_lifecycle import (
    ReturnLifecycleManager,
    ReturnTransitionResult,
    parse_return_status,
)

__all__ = [
    "ReturnLifecycleManager",
    "ReturnTransitionResult",
    "parse_return_status",
]

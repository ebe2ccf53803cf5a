"""Arrangement clip transform engine.

Everything in here talks to Live only through :class:`engine.host.Host`,
so the algorithms can be driven by the socket bridge or by an in-process
transport in tests.
"""

from ArrangementMCP_Server.engine.errors import (
    FormatError,
    HostCommandError,
    LimitExceededError,
    NotFoundError,
    TransformError,
    ValidationError,
)
from ArrangementMCP_Server.engine.orchestrator import (
    TransformContext,
    TransformResult,
    transform_clips,
)

__all__ = [
    "FormatError",
    "HostCommandError",
    "LimitExceededError",
    "NotFoundError",
    "TransformContext",
    "TransformError",
    "TransformResult",
    "ValidationError",
    "transform_clips",
]

"""Agent-friendly JSON envelope for CLI output."""

from __future__ import annotations

from fitplan.agent.response import (
    AgentResponse,
    create_response,
    error_response,
    evaluation_response,
)

__all__ = [
    "AgentResponse",
    "create_response",
    "error_response",
    "evaluation_response",
]

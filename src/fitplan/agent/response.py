"""JSON response envelope for agents driving the CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from fitplan.engine import EvaluationResult
from fitplan.export.formatters import result_to_dict


@dataclass
class AgentResponse:
    """Envelope wrapped around every --json CLI output.

    A blocked plan is still a successful command: the verdict lives in
    data, blocking codes are echoed in blockers and the alternatives in
    suggestions. success is False only when the command itself failed.
    """

    success: bool
    command: str
    data: dict[str, Any] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    blockers: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    human_summary: str = ""
    schema_version: str = "1.0"

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "command": self.command,
            "data": self.data,
            "errors": self.errors,
            "blockers": self.blockers,
            "warnings": self.warnings,
            "suggestions": self.suggestions,
            "human_summary": self.human_summary,
            "timestamp": datetime.now().isoformat(),
            "schema_version": self.schema_version,
        }


def create_response(
    command: str,
    data: Optional[dict[str, Any]] = None,
    human_summary: str = "",
) -> AgentResponse:
    """Successful response carrying arbitrary command data."""
    return AgentResponse(
        success=True,
        command=command,
        data=data or {},
        human_summary=human_summary,
    )


def evaluation_response(
    command: str,
    result: EvaluationResult,
    profile_name: Optional[str] = None,
) -> AgentResponse:
    """Build the envelope for an evaluation.

    Args:
        command: CLI command name
        result: Engine output
        profile_name: Optional profile label echoed in data

    Returns:
        AgentResponse with success=True, blocked or not
    """
    verdict = result.verdict
    data = result_to_dict(result)
    if profile_name:
        data["profile"] = profile_name

    target = round(result.plan.target_calories)
    if verdict.can_proceed:
        summary = f"Plan can proceed at {target} kcal/day"
        if verdict.warnings:
            summary += f" with {len(verdict.warnings)} warning(s)"
    else:
        summary = (
            f"Plan blocked by {len(verdict.errors)} rule(s); "
            f"{len(result.alternatives)} alternative(s) found"
        )

    suggestions = [alt.label for alt in result.alternatives]
    for rule in verdict.warnings:
        suggestions.extend(ref.description for ref in rule.alternatives)

    return AgentResponse(
        success=True,
        command=command,
        data=data,
        blockers=[f"{r.code.value}: {r.message}" for r in verdict.errors],
        warnings=[f"{r.code.value}: {r.message}" for r in verdict.warnings],
        suggestions=suggestions,
        human_summary=summary,
    )


def error_response(
    command: str,
    error: str,
    suggestions: Optional[list[str]] = None,
) -> AgentResponse:
    """Create an error response.

    Args:
        command: The command that failed
        error: Error message
        suggestions: Suggestions for fixing the error

    Returns:
        AgentResponse with success=False
    """
    return AgentResponse(
        success=False,
        command=command,
        errors=[error],
        suggestions=suggestions or [],
        human_summary=f"Error: {error}",
    )

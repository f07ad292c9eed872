"""Output formatters for evaluation results."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from fitplan.adjust.strategies import AlternativePlan
from fitplan.engine import EvaluationResult
from fitplan.planning.models import AdjustedPlan
from fitplan.profiles.body_calc import RawMetrics
from fitplan.validation.models import RuleResult, ValidationVerdict


# =============================================================================
# Plain-data conversion
# =============================================================================


def metrics_to_dict(raw: RawMetrics) -> dict[str, Any]:
    zones = raw.hr_zones
    return {
        "bmi": round(raw.bmi, 1),
        "bmr": round(raw.bmr),
        "base_tdee": round(raw.base_tdee),
        "ideal_weight_range": {
            "min_kg": round(raw.ideal_weight_range.min_kg, 1),
            "max_kg": round(raw.ideal_weight_range.max_kg, 1),
        },
        "body_fat": {
            "value": raw.body_fat.value,
            "source": raw.body_fat.source.value,
        },
        "lean_mass_kg": round(raw.lean_mass_kg, 1),
        "fat_mass_kg": round(raw.fat_mass_kg, 1),
        "waist_hip_ratio": (
            round(raw.waist_hip_ratio, 2) if raw.waist_hip_ratio is not None else None
        ),
        "vo2max_estimate": raw.vo2max_estimate,
        "max_heart_rate": raw.max_heart_rate,
        "hr_zones": {
            name: {"min_bpm": zone.min_bpm, "max_bpm": zone.max_bpm}
            for name, zone in (
                ("fat_burn", zones.fat_burn),
                ("cardio", zones.cardio),
                ("peak", zones.peak),
            )
        },
        "water_ml": raw.water_ml,
        "fiber_g": raw.fiber_g,
        "diet_readiness_score": raw.diet_readiness_score,
        "metabolic_age": raw.metabolic_age,
        "healthy_body_fat_range": list(raw.healthy_body_fat_range),
        "recommended_intensity": raw.recommended_intensity.value,
        "recommended_sleep_hours": raw.recommended_sleep_hours,
        "overall_health_score": raw.overall_health_score,
        "fitness_readiness_score": raw.fitness_readiness_score,
    }


def plan_to_dict(plan: AdjustedPlan) -> dict[str, Any]:
    base = plan.base
    data: dict[str, Any] = {
        "direction": plan.direction.value,
        "required_weekly_rate_kg": round(plan.required_weekly_rate_kg, 3),
        "exercise_kcal_per_week": round(base.exercise_kcal_per_week),
        "true_tdee": round(plan.true_tdee),
        "adjusted_tdee": round(plan.adjusted_tdee),
        "target_calories": round(plan.target_calories),
        "protein_g": round(plan.protein_g),
        "carbs_g": round(plan.carbs_g),
        "fat_g": round(plan.fat_g),
        "activity_level": plan.activity_level.value,
        "projected_timeline_weeks": plan.projected_timeline_weeks,
        "modifier_notes": list(plan.modifier_notes),
        "refeed": None,
    }
    if plan.refeed is not None:
        data["refeed"] = {
            "weekly_refeeds": plan.refeed.weekly_refeeds,
            "diet_break_week": plan.refeed.diet_break_week,
            "explanation": list(plan.refeed.explanation),
        }
    return data


def rule_to_dict(rule: RuleResult) -> dict[str, Any]:
    return {
        "code": rule.code.value,
        "severity": rule.severity.value,
        "message": rule.message,
        "recommendations": list(rule.recommendations),
        "alternatives": [
            {
                "strategy": ref.strategy.value,
                "changed_fields": dict(ref.changed_fields),
                "description": ref.description,
            }
            for ref in rule.alternatives
        ],
    }


def verdict_to_dict(verdict: ValidationVerdict) -> dict[str, Any]:
    return {
        "can_proceed": verdict.can_proceed,
        "errors": [rule_to_dict(r) for r in verdict.errors],
        "warnings": [rule_to_dict(r) for r in verdict.warnings],
    }


def alternative_to_dict(alternative: AlternativePlan) -> dict[str, Any]:
    return {
        "label": alternative.label,
        "strategy": alternative.strategy.value,
        "changed_fields": dict(alternative.changed_fields),
        "plan": plan_to_dict(alternative.resulting_plan),
        "verdict": verdict_to_dict(alternative.resulting_verdict),
        "phases": [
            {
                "label": phase.label,
                "profile_changes": dict(phase.profile_changes),
                "plan": plan_to_dict(phase.plan),
                "verdict": verdict_to_dict(phase.verdict),
            }
            for phase in alternative.phases
        ],
    }


def result_to_dict(result: EvaluationResult) -> dict[str, Any]:
    """Convert an EvaluationResult to JSON-safe plain data."""
    return {
        "metrics": metrics_to_dict(result.metrics),
        "plan": plan_to_dict(result.plan),
        "verdict": verdict_to_dict(result.verdict),
        "alternatives": [alternative_to_dict(a) for a in result.alternatives],
    }


# =============================================================================
# Formatters
# =============================================================================


class TableFormatter:
    """Format results as Rich tables for terminal display."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize the formatter.

        Args:
            console: Rich console for output. If None, creates a new one.
        """
        self.console = console or Console()

    def format(self, result: EvaluationResult, profile_name: Optional[str] = None) -> None:
        """Print verdict, plan, notes and alternatives to the console."""
        verdict = result.verdict
        status_color = "green" if verdict.can_proceed else "red"
        status = "CAN PROCEED" if verdict.can_proceed else "BLOCKED"
        header_lines = [
            f"[bold]PLAN EVALUATION[/bold] - {datetime.now().strftime('%Y-%m-%d %H:%M')}",
        ]
        if profile_name:
            header_lines.append(f"Profile: {profile_name}")
        header_lines.append(f"Status: [{status_color}]{status}[/{status_color}]")
        self.console.print(Panel("\n".join(header_lines), title="Fitness Plan"))

        self.format_plan(result.plan)

        if result.plan.modifier_notes:
            self.console.print("\n[bold]Adjustments:[/bold]")
            for note in result.plan.modifier_notes:
                self.console.print(f"  - {note}")

        self.format_rules(verdict)

        if result.alternatives:
            alt_table = Table(title="Alternatives")
            alt_table.add_column("Option", style="cyan")
            alt_table.add_column("Strategy")
            alt_table.add_column("Calories", justify="right")
            alt_table.add_column("Weeks", justify="right")
            for alt in result.alternatives:
                alt_table.add_row(
                    alt.label,
                    alt.strategy.value,
                    f"{alt.resulting_plan.target_calories:.0f}",
                    str(alt.resulting_plan.projected_timeline_weeks),
                )
            self.console.print(alt_table)
        elif not verdict.can_proceed:
            self.console.print("[yellow]No automatic alternative found.[/yellow]")

    def format_plan(self, plan: AdjustedPlan) -> None:
        table = Table(title="Daily Targets")
        table.add_column("Target")
        table.add_column("Value", justify="right")
        table.add_row("Direction", plan.direction.value)
        table.add_row("Weekly rate", f"{plan.required_weekly_rate_kg:.2f} kg")
        table.add_row("True TDEE", f"{plan.true_tdee:.0f} kcal")
        table.add_row("Adjusted TDEE", f"{plan.adjusted_tdee:.0f} kcal")
        table.add_row("[bold]Calories[/bold]", f"[bold]{plan.target_calories:.0f} kcal[/bold]")
        table.add_row("Protein", f"{plan.protein_g:.0f} g")
        table.add_row("Carbs", f"{plan.carbs_g:.0f} g")
        table.add_row("Fat", f"{plan.fat_g:.0f} g")
        table.add_row("Projected timeline", f"{plan.projected_timeline_weeks} weeks")
        self.console.print(table)

    def format_rules(self, verdict: ValidationVerdict) -> None:
        for rule in verdict.errors:
            self.console.print(f"[red]ERROR {rule.code.value}:[/red] {rule.message}")
            for rec in rule.recommendations:
                self.console.print(f"  [dim]- {rec}[/dim]")
        for rule in verdict.warnings:
            self.console.print(f"[yellow]WARNING {rule.code.value}:[/yellow] {rule.message}")
            for ref in rule.alternatives:
                self.console.print(f"  [dim]-> {ref.description}[/dim]")

    def format_metrics(self, raw: RawMetrics) -> None:
        """Print the calculated body metrics."""
        table = Table(title="Body Metrics")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")
        table.add_row("BMI", f"{raw.bmi:.1f}")
        table.add_row("BMR", f"{raw.bmr:.0f} kcal")
        table.add_row("Base TDEE", f"{raw.base_tdee:.0f} kcal")
        table.add_row(
            "Body fat",
            f"{raw.body_fat.value:.1f}% ({raw.body_fat.source.value})",
        )
        table.add_row("Lean mass", f"{raw.lean_mass_kg:.1f} kg")
        table.add_row(
            "Ideal weight",
            f"{raw.ideal_weight_range.min_kg:.1f}-{raw.ideal_weight_range.max_kg:.1f} kg",
        )
        if raw.waist_hip_ratio is not None:
            table.add_row("Waist/hip", f"{raw.waist_hip_ratio:.2f}")
        table.add_row("VO2max", f"{raw.vo2max_estimate:.1f}")
        table.add_row("Max heart rate", f"{raw.max_heart_rate} bpm")
        table.add_row("Water", f"{raw.water_ml} ml")
        table.add_row("Fiber", f"{raw.fiber_g} g")
        table.add_row("Diet readiness", f"{raw.diet_readiness_score}/100")
        table.add_row("Metabolic age", str(raw.metabolic_age))
        table.add_row("Health score", f"{raw.overall_health_score}/100")
        table.add_row("Fitness readiness", f"{raw.fitness_readiness_score}/100")
        self.console.print(table)


class JSONFormatter:
    """Format results as JSON for programmatic use."""

    def format(self, result: EvaluationResult, profile_name: Optional[str] = None) -> str:
        data: dict[str, Any] = {
            "timestamp": datetime.now().isoformat(),
            "profile": profile_name,
        }
        data.update(result_to_dict(result))
        return json.dumps(data, indent=2)


class MarkdownFormatter:
    """Format results as Markdown for sharing or documentation."""

    def format(self, result: EvaluationResult, profile_name: Optional[str] = None) -> str:
        """Return Markdown string.

        Args:
            result: Evaluation result to format
            profile_name: Optional profile name

        Returns:
            Markdown string
        """
        plan = result.plan
        verdict = result.verdict
        lines = ["# Fitness Plan Evaluation", ""]
        if profile_name:
            lines.append(f"**Profile:** {profile_name}")
        lines.append(f"**Status:** {'Can proceed' if verdict.can_proceed else 'Blocked'}")
        lines.append(f"**Calories:** {plan.target_calories:.0f} kcal")

        lines.extend(
            [
                "",
                "## Daily Targets",
                "",
                "| Target | Value |",
                "|--------|-------|",
                f"| Protein | {plan.protein_g:.0f} g |",
                f"| Carbs | {plan.carbs_g:.0f} g |",
                f"| Fat | {plan.fat_g:.0f} g |",
                f"| True TDEE | {plan.true_tdee:.0f} kcal |",
                f"| Weekly rate | {plan.required_weekly_rate_kg:.2f} kg |",
                f"| Projected timeline | {plan.projected_timeline_weeks} weeks |",
            ]
        )

        if plan.modifier_notes:
            lines.extend(["", "## Adjustments", ""])
            lines.extend(f"- {note}" for note in plan.modifier_notes)

        if verdict.errors:
            lines.extend(["", "## Blocking Issues", ""])
            lines.extend(f"- **{r.code.value}**: {r.message}" for r in verdict.errors)

        if verdict.warnings:
            lines.extend(["", "## Warnings", ""])
            lines.extend(f"- **{r.code.value}**: {r.message}" for r in verdict.warnings)

        if result.alternatives:
            lines.extend(["", "## Alternatives", ""])
            for alt in result.alternatives:
                lines.append(
                    f"- {alt.label} ({alt.resulting_plan.target_calories:.0f} kcal/day)"
                )
                for phase in alt.phases:
                    lines.append(
                        f"  - {phase.label}: {phase.plan.target_calories:.0f} kcal/day"
                    )

        return "\n".join(lines)

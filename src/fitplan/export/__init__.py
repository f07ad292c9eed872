"""Output formatters for evaluation results."""

from fitplan.export.formatters import (
    JSONFormatter,
    MarkdownFormatter,
    TableFormatter,
    result_to_dict,
)

__all__ = ["TableFormatter", "JSONFormatter", "MarkdownFormatter", "result_to_dict"]

"""Console output formatting utilities for actiongraph."""

from __future__ import annotations

import sys
from typing import Optional

from actiongraph.errors import (
    CycleDetectedError,
    DanglingReferenceError,
    PipelineError,
    SchemaViolationError,
    WorkflowSyntaxError,
)
from actiongraph.pipeline import PipelineState


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_header(self, title: str) -> None:
        """Print a section header."""
        print(f"\n{title}")
        print("-" * len(title))

    def print_workflow(self, state: PipelineState) -> None:
        """Print workflow summary and the per-rank layout."""
        wf = state.workflow
        layout = state.layout
        if wf is None or layout is None:
            return
        self.print_header(f"WORKFLOW: {wf.name or '(unnamed)'}")
        print(f"Triggers: {', '.join(wf.on.names) or '-'}")
        print(f"Jobs: {len(wf.jobs)}")
        print(f"Edges: {len(layout.edges)}")
        for rank, ids in enumerate(layout.ranks()):
            print(f"\nRANK {rank}")
            for node_id in ids:
                job = wf.job(node_id)
                extra = []
                if job.runner:
                    extra.append(job.runner)
                if job.is_reusable:
                    extra.append(f"uses {job.uses}")
                else:
                    extra.append(f"{len(job.steps)} step(s)")
                needs = f" <- {', '.join(job.needs)}" if job.needs else ""
                print(f"  {job.label} [{node_id}] ({'; '.join(extra)}){needs}")

    def print_pipeline_error(self, err: PipelineError) -> None:
        """Print a pipeline failure with kind-specific details."""
        if isinstance(err, SchemaViolationError):
            self.print_error(
                "Invalid workflow",
                f"{len(err.violations)} schema violation(s)",
                details=[str(v) for v in err.violations],
            )
        elif isinstance(err, DanglingReferenceError):
            self.print_error(
                "Unknown job in needs",
                f"{len(err.references)} dangling reference(s)",
                details=[str(r) for r in err.references],
                suggestion="Check the job ids listed under `needs:`.",
            )
        elif isinstance(err, CycleDetectedError):
            self.print_error(
                "Circular job dependency",
                " -> ".join(err.path),
                suggestion="Remove one of the `needs:` entries along this path.",
            )
        elif isinstance(err, WorkflowSyntaxError):
            where = f"line {err.line}, column {err.column}" if err.line is not None else "unknown position"
            self.print_error("Invalid YAML", err.message, details=[where])
        else:
            self.print_error(err.kind, err.message)

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: Exception) -> None:
        """Report an unexpected (non-pipeline) failure; traceback only in debug mode."""
        self.print_error(
            "Internal error",
            f"{type(exc).__name__}: {exc}",
            suggestion="Re-run with --debug for the full traceback." if not self.debug else None,
        )
        if self.debug:
            import traceback
            traceback.print_exception(type(exc), exc, exc.__traceback__, file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console

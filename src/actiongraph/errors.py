# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


# ----------------------------------------------------------------------
# Records
# ----------------------------------------------------------------------

PathPart = Any  # str key or int index


def format_path(path: Tuple[PathPart, ...]) -> str:
    """Render ("jobs", "build", "steps", 0) as jobs.build.steps[0]."""
    out = ""
    for part in path:
        if isinstance(part, int):
            out += f"[{part}]"
        elif out:
            out += f".{part}"
        else:
            out = str(part)
    return out or "<root>"


@dataclass(frozen=True)
class SchemaViolation:
    path: Tuple[PathPart, ...]
    message: str
    actual: str | None = None  # type name of the offending input

    def __str__(self) -> str:
        s = f"{format_path(self.path)}: {self.message}"
        if self.actual:
            s += f" (got {self.actual})"
        return s

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": format_path(self.path),
            "message": self.message,
            "actual": self.actual,
        }


@dataclass(frozen=True)
class DanglingReference:
    job_id: str
    missing_need: str

    def __str__(self) -> str:
        return f"Job '{self.job_id}' needs missing job '{self.missing_need}'"

    def to_dict(self) -> Dict[str, str]:
        return {"job": self.job_id, "missing": self.missing_need}


# ----------------------------------------------------------------------
# Errors
# ----------------------------------------------------------------------

@dataclass
class PipelineError(Exception):
    """
    Structured pipeline error with enough context for:
      - clean CLI output
      - the JSON error surface of the HTTP API
      - replacing whatever result is currently displayed
    """
    kind: str
    message: str
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "message": self.message, **self.details}


class WorkflowSyntaxError(PipelineError):
    """Source text is not well-formed YAML."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        details: dict = {}
        if line is not None:
            details["line"] = line
            details["column"] = column
        super().__init__(kind="SyntaxError", message=message, details=details)
        self.line = line
        self.column = column


class SchemaViolationError(PipelineError):
    """Document decoded fine but does not have the shape of a workflow."""

    def __init__(self, violations: List[SchemaViolation]):
        self.violations = list(violations)
        first = self.violations[0] if self.violations else None
        message = str(first) if first else "Invalid workflow"
        if len(self.violations) > 1:
            message += f" (+{len(self.violations) - 1} more)"
        super().__init__(
            kind="SchemaViolation",
            message=message,
            details={"violations": [v.to_dict() for v in self.violations]},
        )

    def __str__(self) -> str:
        lines = [f"{self.kind}: {len(self.violations)} problem(s)"]
        lines.extend(f"  {v}" for v in self.violations)
        return "\n".join(lines)


class DanglingReferenceError(PipelineError):
    """One or more `needs` entries name jobs that do not exist."""

    def __init__(self, references: List[DanglingReference]):
        self.references = list(references)
        super().__init__(
            kind="DanglingReference",
            message="; ".join(str(r) for r in self.references),
            details={"references": [r.to_dict() for r in self.references]},
        )


class CycleDetectedError(PipelineError):
    """Jobs depend on each other in a loop."""

    def __init__(self, path: List[str]):
        self.path = list(path)
        super().__init__(
            kind="CycleDetected",
            message="Circular job dependency: " + " -> ".join(self.path),
            details={"cycle": list(self.path)},
        )

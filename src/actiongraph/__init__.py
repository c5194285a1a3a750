from .schema import validate_workflow
from .dag import build_graph, DependencyGraph
from .layout import layout_graph, size_hints, LayoutResult
from .pipeline import run_pipeline, PipelineState
from .coordinator import PipelineCoordinator
from .model import Workflow, Job, Step, TriggerSpec
from .errors import (
    PipelineError,
    WorkflowSyntaxError,
    SchemaViolationError,
    DanglingReferenceError,
    CycleDetectedError,
)

__all__ = [
    "validate_workflow",
    "build_graph",
    "DependencyGraph",
    "layout_graph",
    "size_hints",
    "LayoutResult",
    "run_pipeline",
    "PipelineState",
    "PipelineCoordinator",
    "Workflow",
    "Job",
    "Step",
    "TriggerSpec",
    "PipelineError",
    "WorkflowSyntaxError",
    "SchemaViolationError",
    "DanglingReferenceError",
    "CycleDetectedError",
]

# pipeline.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .dag import DependencyGraph, build_graph
from .decoder import decode
from .errors import PipelineError
from .layout import LayoutResult, layout_graph, size_hints
from .model import Workflow
from .schema import validate_workflow


STATUS_EMPTY = "empty"
STATUS_OK = "ok"
STATUS_ERROR = "error"


@dataclass(frozen=True)
class PipelineState:
    """
    What consumers see after a run: nothing yet, a laid-out workflow, or an
    error. With an error, `layout`/`workflow` are only set when the
    coordinator was asked to keep the last success on screen.
    """
    status: str
    source: Optional[str] = None
    workflow: Optional[Workflow] = None
    graph: Optional[DependencyGraph] = None
    layout: Optional[LayoutResult] = None
    error: Optional[PipelineError] = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    def to_dict(self) -> Dict[str, Any]:
        wf = self.workflow
        return {
            "status": self.status,
            "workflow": None if wf is None else {
                "name": wf.name,
                "on": {"kind": wf.on.kind, "names": list(wf.on.names)},
                "jobs": list(wf.job_ids),
            },
            "layout": None if self.layout is None else self.layout.to_dict(),
            "error": None if self.error is None else self.error.to_dict(),
        }


EMPTY = PipelineState(status=STATUS_EMPTY)


def run_pipeline(text: Optional[str]) -> PipelineState:
    """
    decode -> validate -> build graph -> layout, synchronously.

    Blank text yields the empty state. Any failure raises the PipelineError of
    the stage that failed; nothing partial is returned.
    """
    document = decode(text or "")
    if document is None:
        return PipelineState(status=STATUS_EMPTY, source=text)

    workflow = validate_workflow(document)
    graph = build_graph(workflow)
    layout = layout_graph(graph, size_hints(graph))
    return PipelineState(status=STATUS_OK, source=text, workflow=workflow, graph=graph, layout=layout)


def failed_state(
    error: PipelineError,
    source: Optional[str],
    previous: PipelineState = EMPTY,
    retain_last_success: bool = False,
) -> PipelineState:
    """Error state; optionally carries the previous successful layout forward."""
    if retain_last_success and previous.layout is not None:
        return PipelineState(
            status=STATUS_ERROR,
            source=source,
            workflow=previous.workflow,
            graph=previous.graph,
            layout=previous.layout,
            error=error,
        )
    return PipelineState(status=STATUS_ERROR, source=source, error=error)

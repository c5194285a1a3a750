# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple


TRIGGER_SINGLE = "single"
TRIGGER_LIST = "list"
TRIGGER_MAPPING = "mapping"


@dataclass(frozen=True)
class TriggerSpec:
    """
    The `on:` block, kept as a tagged variant.

      on: push                      -> kind="single",  names=("push",)
      on: [push, pull_request]      -> kind="list",    names=("push", "pull_request")
      on: {push: {branches: [...]}} -> kind="mapping", names=("push",), config={...}

    Trigger config is opaque here; it is carried, never interpreted.
    """
    kind: str
    names: Tuple[str, ...]
    config: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True)
class Step:
    """A single step inside a job: a shell command, an action reference, or both."""
    name: Optional[str] = None
    run: Optional[str] = None
    uses: Optional[str] = None

    @property
    def kind(self) -> str:
        # `run` wins when both are given
        return "run" if self.run else "uses"

    @property
    def label(self) -> str:
        return self.name or self.run or self.uses or ""


@dataclass(frozen=True)
class Job:
    """
    A workflow job: steps + dependencies + display metadata.

    `id` is the key under `jobs:`; `needs` is always a tuple of job ids in
    declaration order, whatever shape the document used.
    """
    id: str
    name: Optional[str] = None
    runs_on: Tuple[str, ...] = ()
    needs: Tuple[str, ...] = ()
    steps: Tuple[Step, ...] = ()
    uses: Optional[str] = None

    @property
    def label(self) -> str:
        return self.name or self.id

    @property
    def runner(self) -> Optional[str]:
        return ", ".join(self.runs_on) if self.runs_on else None

    @property
    def is_reusable(self) -> bool:
        """Job delegates to another workflow file (`uses:` at job level)."""
        return self.uses is not None


@dataclass(frozen=True)
class Workflow:
    """A validated workflow. `jobs` preserves document order."""
    on: TriggerSpec
    jobs: Mapping[str, Job]
    name: Optional[str] = None

    @property
    def job_ids(self) -> Tuple[str, ...]:
        return tuple(self.jobs)

    def job(self, job_id: str) -> Job:
        return self.jobs[job_id]

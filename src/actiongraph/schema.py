# schema.py
from __future__ import annotations

from types import MappingProxyType
from typing import Annotated, Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, ValidationError, field_validator, model_validator
from pydantic_core import PydanticCustomError

from .errors import SchemaViolation, SchemaViolationError
from .model import TRIGGER_LIST, TRIGGER_MAPPING, TRIGGER_SINGLE, Job, Step, TriggerSpec, Workflow


# -------------------- Schemas --------------------

# GitHub's rule for keys under `jobs:`
JOB_ID_PATTERN = r"^[A-Za-z_][A-Za-z0-9_-]*$"

JobId = Annotated[str, StringConstraints(pattern=JOB_ID_PATTERN)]


class StepSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    run: Optional[str] = None
    uses: Optional[str] = None

    @model_validator(mode="after")
    def _run_or_uses(self) -> "StepSchema":
        # an empty command counts as absent
        if not self.run and not self.uses:
            raise PydanticCustomError("step_action", "Each step must have either 'run' or 'uses'")
        return self


class JobSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    runs_on: Tuple[str, ...] = Field(default=(), alias="runs-on")
    needs: Tuple[str, ...] = ()
    steps: List[StepSchema] = Field(default_factory=list)
    uses: Optional[str] = None

    @field_validator("runs_on", mode="before")
    @classmethod
    def _normalize_runs_on(cls, v: Any) -> Tuple[str, ...]:
        if v is None:
            return ()
        if isinstance(v, str):
            return (v,)
        if isinstance(v, list) and all(isinstance(x, str) for x in v):
            return tuple(v)
        raise PydanticCustomError("runs_on_shape", "expected a runner label or a list of runner labels")

    @field_validator("needs", mode="before")
    @classmethod
    def _normalize_needs(cls, v: Any) -> Tuple[str, ...]:
        if v is None:
            return ()
        if isinstance(v, str):
            return (v,)
        if isinstance(v, list) and all(isinstance(x, str) for x in v):
            # drop repeats, keep first occurrence
            return tuple(dict.fromkeys(v))
        raise PydanticCustomError("needs_shape", "expected a job id or a list of job ids")

    @field_validator("steps", mode="before")
    @classmethod
    def _default_steps(cls, v: Any) -> Any:
        return [] if v is None else v


class WorkflowSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    on: Any
    jobs: Dict[JobId, JobSchema]

    @field_validator("on", mode="before")
    @classmethod
    def _tag_trigger(cls, v: Any) -> TriggerSpec:
        if isinstance(v, str):
            return TriggerSpec(kind=TRIGGER_SINGLE, names=(v,))
        if isinstance(v, list) and all(isinstance(x, str) for x in v):
            return TriggerSpec(kind=TRIGGER_LIST, names=tuple(v))
        if isinstance(v, dict) and all(isinstance(k, str) for k in v):
            return TriggerSpec(kind=TRIGGER_MAPPING, names=tuple(v), config=MappingProxyType(dict(v)))
        raise PydanticCustomError(
            "trigger_shape",
            "expected a trigger name, a list of trigger names, or a mapping of trigger name to config",
        )


# -------------------- Validation --------------------

_MESSAGES = {
    "missing": "required field is missing",
    "dict_type": "expected a mapping",
    "model_type": "expected a mapping",
    "model_attributes_type": "expected a mapping",
    "list_type": "expected a list",
    "string_type": "expected a string",
    "string_pattern_mismatch": "job id must start with a letter or '_' and contain only letters, digits, '-' or '_'",
}


def _type_name(value: Any) -> str:
    return "null" if value is None else type(value).__name__


def _violations(err: ValidationError) -> List[SchemaViolation]:
    out: List[SchemaViolation] = []
    for e in err.errors(include_url=False):
        # no single offending value for these
        whole = e["type"] in ("missing", "step_action")
        loc = tuple(e["loc"])
        # dict key errors end in a "[key]" marker; report the key itself
        if loc and loc[-1] == "[key]":
            loc = loc[:-1]
        out.append(
            SchemaViolation(
                path=loc,
                message=_MESSAGES.get(e["type"], e["msg"]),
                actual=None if whole else _type_name(e.get("input")),
            )
        )
    return out


def _to_workflow(doc: WorkflowSchema) -> Workflow:
    jobs: Dict[str, Job] = {}
    for job_id, j in doc.jobs.items():
        jobs[job_id] = Job(
            id=job_id,
            name=j.name,
            runs_on=j.runs_on,
            needs=j.needs,
            steps=tuple(Step(name=s.name, run=s.run, uses=s.uses) for s in j.steps),
            uses=j.uses,
        )
    return Workflow(on=doc.on, jobs=MappingProxyType(jobs), name=doc.name)


def validate_workflow(document: Any) -> Workflow:
    """
    Check a decoded document against the workflow schema.

    Returns an immutable Workflow. Raises SchemaViolationError carrying every
    violation pydantic found in one pass.
    """
    if not isinstance(document, dict):
        raise SchemaViolationError(
            [SchemaViolation(path=(), message="expected a mapping at top level", actual=_type_name(document))]
        )

    try:
        doc = WorkflowSchema.model_validate(document)
    except ValidationError as e:
        raise SchemaViolationError(_violations(e)) from e

    return _to_workflow(doc)

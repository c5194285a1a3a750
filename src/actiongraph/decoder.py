# decoder.py
from __future__ import annotations

from typing import Any

import yaml

from .errors import WorkflowSyntaxError


def decode(text: str) -> Any:
    """
    Parse workflow source text into plain Python data.

    Returns None for blank text. Raises WorkflowSyntaxError on malformed YAML,
    with a 1-based line/column when the parser reports one.
    """
    if not text or not text.strip():
        return None

    try:
        data = yaml.safe_load(text)
    except yaml.MarkedYAMLError as e:
        mark = e.problem_mark or e.context_mark
        message = " ".join(p for p in (e.context, e.problem) if p) or str(e)
        if mark is None:
            raise WorkflowSyntaxError(message) from e
        raise WorkflowSyntaxError(message, line=mark.line + 1, column=mark.column + 1) from e
    except yaml.YAMLError as e:
        raise WorkflowSyntaxError(str(e)) from e

    # YAML 1.1 reads a bare `on:` key as the boolean True
    if isinstance(data, dict) and "on" not in data and any(k is True for k in data):
        data = {("on" if k is True else k): v for k, v in data.items()}

    return data

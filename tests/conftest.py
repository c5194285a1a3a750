"""Shared helpers for building workflow documents in tests."""

import textwrap

import pytest

from actiongraph.dag import build_graph
from actiongraph.schema import validate_workflow
from actiongraph.ui.console import Console, set_console


@pytest.fixture(autouse=True)
def quiet_console():
    set_console(Console(debug=False))
    yield


@pytest.fixture
def make_doc():
    def _make(jobs, on="push", **extra):
        return {"on": on, "jobs": jobs, **extra}
    return _make


@pytest.fixture
def make_graph(make_doc):
    def _make(jobs):
        return build_graph(validate_workflow(make_doc(jobs)))
    return _make


@pytest.fixture
def yaml_text():
    def _dedent(s):
        return textwrap.dedent(s).lstrip("\n")
    return _dedent

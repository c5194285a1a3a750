import pytest

from actiongraph.decoder import decode
from actiongraph.errors import WorkflowSyntaxError


def test_blank_text_decodes_to_none():
    assert decode("") is None
    assert decode("  \n\t\n") is None


def test_bare_on_key_is_restored(yaml_text):
    data = decode(yaml_text("""
        on: push
        jobs:
          a:
            runs-on: x
    """))
    assert data["on"] == "push"
    assert True not in data
    assert list(data) == ["on", "jobs"]


def test_quoted_on_key_untouched(yaml_text):
    data = decode(yaml_text("""
        "on": [push]
        jobs: {}
    """))
    assert data == {"on": ["push"], "jobs": {}}


def test_malformed_yaml_reports_position(yaml_text):
    with pytest.raises(WorkflowSyntaxError) as excinfo:
        decode(yaml_text("""
            on: push
            jobs:
              a: [unclosed
        """))
    err = excinfo.value
    assert err.kind == "SyntaxError"
    assert err.line is not None and err.line >= 3
    assert err.column is not None
    assert err.to_dict()["line"] == err.line

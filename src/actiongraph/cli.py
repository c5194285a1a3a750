# cli.py
from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from actiongraph.errors import PipelineError
from actiongraph.example import EXAMPLE_WORKFLOW
from actiongraph.pipeline import STATUS_EMPTY, PipelineState, run_pipeline
from actiongraph.ui.console import Console, get_console, set_console


def find_workflow_files() -> list[Path]:
    """
    Find GitHub workflow files under the current directory.

    Returns:
        Sorted list of .yml/.yaml files in .github/workflows
    """
    workflows_dir = Path(".github") / "workflows"
    if not workflows_dir.is_dir():
        return []
    return sorted(p for p in workflows_dir.iterdir() if p.suffix in (".yml", ".yaml"))


def discover_workflow(workflow_arg: str | None) -> Path:
    """
    Discover workflow file from argument or default.

    Args:
        workflow_arg: Optional workflow argument from CLI

    Returns:
        Path to workflow file

    Raises:
        SystemExit: If workflow cannot be found or multiple workflows exist
    """
    console = get_console()

    if workflow_arg:
        workflow_path = Path(workflow_arg)
        if not workflow_path.exists():
            console.print_error(
                "Workflow file not found",
                f"Could not find workflow file: {workflow_arg}",
            )
            sys.exit(1)
        return workflow_path

    workflow_files = find_workflow_files()

    if len(workflow_files) == 0:
        console.print_error(
            "No workflow file found",
            "Could not find any workflow files.",
            details=["Looked for:", "  .github/workflows/*.yml", "  .github/workflows/*.yaml"],
            suggestion="Specify a workflow explicitly:\n  actiongraph check path/to/workflow.yml",
        )
        sys.exit(1)

    if len(workflow_files) > 1:
        file_list = "\n".join(f"  {f}" for f in workflow_files)
        console.print_error(
            "Multiple workflow files found",
            "Found multiple workflow files. Please specify which one to use:",
            details=[file_list],
            suggestion=f"Specify a workflow explicitly:\n  actiongraph check {workflow_files[0]}",
        )
        sys.exit(1)

    return workflow_files[0]


def _run_file(path: Path) -> PipelineState:
    """Run the pipeline on a file; print the error and exit 1 on failure."""
    console = get_console()
    try:
        state = run_pipeline(path.read_text(encoding="utf-8"))
    except PipelineError as e:
        console.print_pipeline_error(e)
        console.print_debug(repr(e))
        sys.exit(1)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)

    if state.status == STATUS_EMPTY:
        console.print_error("Empty workflow", f"{path} has no content.")
        sys.exit(1)
    return state


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """actiongraph: validate GitHub Actions workflows and lay out their job graph."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.argument("workflow", required=False)
def check(workflow):
    """Validate a workflow and print its jobs rank by rank."""
    console = get_console()
    path = discover_workflow(workflow)
    state = _run_file(path)
    console.print_workflow(state)
    console.print_info("\nOK")


@cli.command()
@click.argument("workflow", required=False)
@click.option("--indent", default=2, show_default=True, type=int, help="JSON indentation")
def layout(workflow, indent):
    """Print the render-ready node/edge layout as JSON."""
    path = discover_workflow(workflow)
    state = _run_file(path)
    click.echo(json.dumps(state.layout.to_dict(), indent=indent))


@cli.command()
def example():
    """Print the built-in example workflow."""
    click.echo(EXAMPLE_WORKFLOW, nl=False)


if __name__ == "__main__":
    cli()

"""CLI interface."""
from __future__ import annotations

import json
import logging
from typing import Any, Optional

import typer

from topicgraph.errors import NotFound, TopicGraphError
from topicgraph.layout import layout_visible_components
from topicgraph.migrate import LATEST_VERSION, load_document, migrate as migrate_document
from topicgraph.models.diagram import TOPIC_DIAGRAM_ID
from topicgraph.queries import criteria_table
from topicgraph.utils.config import settings
from topicgraph.utils.file_utils import load_json_document, save_json_document

app = typer.Typer(add_completion=False)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at debug level.")):
    """Inspect and upgrade persisted topic documents."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2))


def _fail(message: str) -> None:
    typer.echo(message, err=True)
    raise typer.Exit(code=1)


def _load(file: str) -> dict:
    try:
        return load_json_document(file)
    except (FileNotFoundError, ValueError) as exc:
        _fail(str(exc))


@app.command()
def migrate(
    file: str = typer.Argument(..., help="Path to a persisted topic document."),
    from_version: Optional[int] = typer.Option(None, "--from-version", help="Override the document's own version."),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write the result here instead of stdout."),
):
    """Upgrade a document to the latest version."""
    persisted = _load(file)
    version = from_version if from_version is not None else int(persisted.get("version", 0))
    try:
        migrated = migrate_document(persisted, version)
    except TopicGraphError as exc:
        _fail(str(exc))

    if output:
        save_json_document(output, migrated)
        typer.echo(f"Wrote version {LATEST_VERSION} document to {output}")
    else:
        _echo_json(migrated)


@app.command()
def layout(
    file: str = typer.Argument(..., help="Path to a persisted topic document."),
    diagram: str = typer.Option(TOPIC_DIAGRAM_ID, "--diagram", "-d", help="Diagram to lay out."),
):
    """Print computed node positions for one diagram."""
    try:
        document = load_document(_load(file))
    except TopicGraphError as exc:
        _fail(str(exc))

    target = document.diagrams.get(diagram)
    if target is None:
        _fail(f"Unknown diagram '{diagram}'. Available: {', '.join(sorted(document.diagrams))}")

    laid_out = layout_visible_components(target, settings)
    _echo_json(
        {node.id: node.position.model_dump() for node in laid_out.nodes if node.showing and node.position is not None}
    )


@app.command()
def validate(file: str = typer.Argument(..., help="Path to a persisted topic document.")):
    """Check that a document migrates cleanly and matches the latest schema."""
    persisted = _load(file)
    try:
        document = load_document(persisted)
    except TopicGraphError as exc:
        _echo_json({"valid": False, "error": str(exc)})
        raise typer.Exit(code=1)

    _echo_json(
        {
            "valid": True,
            "version": document.version,
            "diagrams": len(document.diagrams),
            "nodes": sum(len(d.nodes) for d in document.diagrams.values()),
            "edges": sum(len(d.edges) for d in document.diagrams.values()),
        }
    )


@app.command()
def table(
    file: str = typer.Argument(..., help="Path to a persisted topic document."),
    problem_id: str = typer.Argument(..., help="Problem node whose criteria table to print."),
):
    """Print the criteria table (criteria by solutions) for a problem."""
    try:
        document = load_document(_load(file))
    except TopicGraphError as exc:
        _fail(str(exc))

    result = criteria_table(document, problem_id)
    if result is None:
        _fail(str(NotFound("No problem node for criteria table", problem_id)))
    _echo_json(
        {
            "problem": result.problem.label,
            "criteria": [c.id for c in result.criteria],
            "solutions": result.columns(),
            "rows": result.rows(),
        }
    )


if __name__ == "__main__":
    app()

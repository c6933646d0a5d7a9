"""CLI entrypoint for the memory bundle loader."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer

from memory_bundle.bundle.loader import BundleLoader
from memory_bundle.bundle.snapshot import read_snapshot
from memory_bundle.core.config import Settings
from memory_bundle.core.logging import configure_logging, get_logger
from memory_bundle.personality.mbti import PersonalityProfile

app = typer.Typer(name="mbl", help="Selective memory bundle loader")

logger = logging.getLogger("memory_bundle.cli")


def _settings(project_root: Optional[Path], config: Optional[Path]) -> Settings:
    settings = Settings.from_yaml(config)
    if project_root is not None:
        settings.project_root = project_root.expanduser()
    return settings


def _configure(verbose: bool, quiet: bool) -> None:
    if quiet:
        level = "ERROR"
    elif verbose:
        level = "DEBUG"
    else:
        level = "WARNING"
    configure_logging(level=level)


@app.command()
def load(
    query: str = typer.Argument(..., help="Query text"),
    threshold: Optional[float] = typer.Option(None, "--threshold", min=0.0, max=1.0, help="Minimum match fraction"),
    max_results: Optional[int] = typer.Option(None, "--max-results", min=1, help="Maximum sessions to load"),
    cascade: Optional[bool] = typer.Option(None, "--cascade/--no-cascade", help="Force narrow-then-wide search on/off"),
    project_root: Optional[Path] = typer.Option(None, "--project-root", help="Project directory"),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML config file"),
    as_json: bool = typer.Option(False, "--json", help="Print the full snapshot"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
) -> None:
    """Score stored sessions against QUERY and write the bundle snapshot."""
    _configure(verbose, quiet)
    try:
        settings = _settings(project_root, config)
        loader = BundleLoader(settings, logger=get_logger("memory_bundle.cli"))
        snapshot = loader.load(query, cascading=cascade, threshold=threshold, max_results=max_results)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Bundle load failed: %s", exc)
        typer.echo(f"Bundle load failed: {exc}", err=True)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(snapshot.model_dump(mode="json", by_alias=True), indent=2))
        return
    result = snapshot.search_result
    if result["found"]:
        top = result["top_match"]
        typer.echo(
            f"{snapshot.matched_count} session(s) matched via {snapshot.layer} layer; "
            f"top {top['id']} ({top['percent_score']:.0%})"
        )
    else:
        typer.echo(f"No sessions matched: {result['reason']['message']}")
    typer.echo(f"Snapshot written to {settings.snapshot_path}")


@app.command()
def show(
    project_root: Optional[Path] = typer.Option(None, "--project-root", help="Project directory"),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML config file"),
) -> None:
    """Print the cached snapshot and whether it has expired."""
    _configure(False, False)
    settings = _settings(project_root, config)
    snapshot = read_snapshot(settings.snapshot_path)
    if snapshot is None:
        typer.echo(f"No snapshot at {settings.snapshot_path}", err=True)
        raise typer.Exit(code=1)
    payload = {
        "expired": snapshot.is_expired(),
        "snapshot": snapshot.model_dump(mode="json", by_alias=True),
    }
    typer.echo(json.dumps(payload, indent=2))


@app.command()
def classify(
    messages: List[str] = typer.Argument(..., help="Messages to analyse"),
    threshold: Optional[float] = typer.Option(None, "--threshold", min=0.0, max=1.0, help="Confidence required"),
) -> None:
    """Infer an MBTI-style type from MESSAGES."""
    _configure(False, False)
    settings = Settings.from_yaml()
    profile = PersonalityProfile()
    profile.observe_all(messages)
    result = profile.classify(threshold if threshold is not None else settings.mbti_confidence_threshold)
    payload = {
        "label": result.label,
        "confidence": round(result.confidence, 3),
        "needs_more_data": result.needs_more_data,
        "ambiguous": list(result.ambiguous),
        "profile": profile.to_dict(),
    }
    typer.echo(json.dumps(payload, indent=2))


if __name__ == "__main__":
    app()

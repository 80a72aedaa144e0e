#!/usr/bin/env python3
# dryflow/cli.py

import glob as _glob
import logging
from pathlib import Path
from typing import List, Optional

import pandas as pd
import typer

from dryflow.config import DryRunConfig, default_workflow_paths, load_config
from dryflow.errors import ConfigError, ParseError
from dryflow.runner import build_context, run_dry_run, summarize_by_document
from dryflow.semantic.references import scan_document
from dryflow.structural.loader import load_document
from dryflow.utils.io import write_json
from dryflow.utils.logger import set_level

app = typer.Typer(help="dryflow CLI - Offline dry-run validation of n8n workflow JSON")


def _resolve_config(
    config_path: Optional[Path],
    fixtures: Optional[Path] = None,
    timeout_ms: Optional[int] = None,
) -> DryRunConfig:
    try:
        cfg = load_config(config_path)
        return cfg.with_overrides(
            fixtures_file=str(fixtures) if fixtures else None,
            script_timeout_ms=timeout_ms,
        )
    except ConfigError as e:
        raise typer.BadParameter(str(e))


@app.command()
def check(
    files: Optional[List[Path]] = typer.Argument(None, help="Workflow JSON files (default: the configured workflow files)"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", exists=True, readable=True, help="JSON/YAML config file"),
    fixtures: Optional[Path] = typer.Option(None, "--fixtures", exists=True, readable=True, help="Extra mock fixtures (node name -> item)"),
    timeout_ms: Optional[int] = typer.Option(None, "--timeout-ms", min=1, help="Wall-clock budget per code node script"),
    report: Optional[Path] = typer.Option(None, "--report", help="Write a JSON report to this path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """
    Validate workflow files: schema, connection graph, node references,
    code node execution against mock data and LLM request bodies.
    Exits with 1 when any check fails.
    """
    if verbose:
        set_level(logging.DEBUG)

    cfg = _resolve_config(config_path, fixtures, timeout_ms)
    paths = list(files) if files else default_workflow_paths(cfg)

    try:
        context = build_context(cfg)
    except ConfigError as e:
        raise typer.BadParameter(str(e))

    result = run_dry_run(paths, cfg, context)
    typer.echo(result.render())

    if report is not None:
        write_json(report, result.to_dict())
        typer.echo(f"[ok] wrote report to {report}")

    raise typer.Exit(code=result.exit_code)


@app.command()
def refs(
    file: Path = typer.Argument(..., help="Workflow JSON file"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", exists=True, readable=True, help="JSON/YAML config file"),
):
    """
    List every node name referenced inside a workflow and whether it resolves.
    """
    cfg = _resolve_config(config_path)
    try:
        doc = load_document(file)
    except ParseError as e:
        typer.echo(f"[error] {e}", err=True)
        raise typer.Exit(code=1)

    scan = scan_document(doc, cfg)
    for name in sorted(scan.found):
        mark = "missing" if name in scan.unresolved else "ok"
        typer.echo(f"{mark:8} {name}")
    typer.echo(f"{len(scan.found)} references, {len(scan.unresolved)} unresolved")
    raise typer.Exit(code=0 if scan.ok else 1)


@app.command()
def bench(
    glob: str = typer.Option("bench/*/*/workflow.json", "--glob", help="Glob for workflow JSON files"),
    out: Path = typer.Option(Path("experiments/results/dryrun.csv"), "--out", help="CSV path to write results"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", exists=True, readable=True, help="JSON/YAML config file"),
):
    """
    Dry-run every matching workflow and export a per-file CSV summary.
    """
    cfg = _resolve_config(config_path)
    paths = sorted(Path(p) for p in _glob.glob(glob))
    if not paths:
        typer.echo(f"[warn] no files match {glob}", err=True)

    rows = summarize_by_document(paths, cfg)
    out.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(rows, columns=["file", "passed", "failed", "errors", "ok"]).to_csv(out, index=False)
    typer.echo(f"[ok] wrote {out}")


if __name__ == "__main__":
    app()

"""CLI entry point for npk-deploy, built on cli-core-yo.

Provides ``deploy`` and ``preflight`` commands.

Usage::

    python -m npk_deploy --help
    python -m npk_deploy preflight --settings npk-settings.json
    python -m npk_deploy deploy --settings npk-settings.json --template-dir terraform
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Callable, Optional

import typer
from cli_core_yo import output
from cli_core_yo.app import create_app
from cli_core_yo.runtime import _reset, initialize
from cli_core_yo.spec import CliSpec, XdgSpec

from npk_deploy import ui

logger = logging.getLogger(__name__)

# ── App specification ────────────────────────────────────────────────────────

spec = CliSpec(
    prog_name="npk-deploy",
    app_display_name="NPK Deploy",
    dist_name="npk-deploy",
    root_help=(
        "Validate AWS account capability and deploy the NPK GPU spot "
        "cracking cluster."
    ),
    xdg=XdgSpec(app_dir_name="npk"),
)

app = create_app(spec)


# ── Root callback (global options) ───────────────────────────────────────────


@app.callback()
def _root_callback(
    json_flag: bool = typer.Option(
        False, "--json", "-j", help="Output as JSON."
    ),
) -> None:
    """NPK deployment control plane."""
    _reset()
    debug = os.environ.get("CLI_CORE_YO_DEBUG") == "1"
    xdg_paths = app._cli_core_yo_xdg_paths  # type: ignore[attr-defined]
    initialize(spec, xdg_paths, json_mode=json_flag, debug=debug)


def _configure_logging(debug: bool) -> None:
    if debug:
        logging.basicConfig(level=logging.DEBUG)
        logging.getLogger("npk_deploy").setLevel(logging.DEBUG)


def _run_guarded(fn: Callable[[], int]) -> int:
    """Run *fn*; print the support banner on any non-zero result or crash."""
    try:
        rc = fn()
    except Exception:
        logger.exception("Unexpected error")
        ui.help_banner()
        return 1
    if rc != 0:
        ui.help_banner()
    return rc


# ── Shared options ───────────────────────────────────────────────────────────

_SETTINGS = typer.Option(
    "npk-settings.json", "--settings", help="Path to the NPK settings document.",
)
_CATALOG = typer.Option(
    None, "--catalog", help="GPU instance family catalog (defaults to the bundled one).",
)
_PROFILE = typer.Option(
    None, "--profile", help="AWS CLI profile. Overrides 'awsProfile' from settings.",
)
_NON_INTERACTIVE = typer.Option(
    False, "--non-interactive", help="Disable prompts; confirmations are refused.",
)
_REFRESH = typer.Option(
    False, "--refresh", help="Ignore cached quotas and availability zones.",
)
_MAX_WORKERS = typer.Option(
    None, "--max-workers", min=1, help="Cap on concurrent per-region probes.",
)
_DEBUG = typer.Option(False, "--debug", help="Enable debug output.")


def _gate_kwargs(catalog, non_interactive, refresh, max_workers) -> dict:
    kwargs = {
        "non_interactive": non_interactive,
        "refresh": refresh,
        "max_workers": max_workers,
    }
    if catalog:
        kwargs["catalog_path"] = catalog
    return kwargs


# ── preflight command ────────────────────────────────────────────────────────


@app.command()
def preflight(
    settings: str = _SETTINGS,
    catalog: Optional[str] = _CATALOG,
    profile: Optional[str] = _PROFILE,
    non_interactive: bool = _NON_INTERACTIVE,
    refresh: bool = _REFRESH,
    max_workers: Optional[int] = _MAX_WORKERS,
    debug: bool = _DEBUG,
) -> None:
    """Validate settings and account capability only (nothing is deployed).

    Exits 0 on success, non-zero on validation failure.
    """
    from npk_deploy.workflow.deploy import run_preflight_only

    _configure_logging(debug)
    output.action(f"Running preflight for {settings} ...")
    rc = _run_guarded(
        lambda: run_preflight_only(
            settings,
            profile=profile,
            **_gate_kwargs(catalog, non_interactive, refresh, max_workers),
        )
    )
    raise typer.Exit(rc)


# ── deploy command ───────────────────────────────────────────────────────────


@app.command()
def deploy(
    settings: str = _SETTINGS,
    catalog: Optional[str] = _CATALOG,
    profile: Optional[str] = _PROFILE,
    template_dir: str = typer.Option(
        "terraform", "--template-dir", help="Directory holding terraform.jsonnet.",
    ),
    render_dir: str = typer.Option(
        "render-npk", "--render-dir", help="Output directory for rendered configurations.",
    ),
    non_interactive: bool = _NON_INTERACTIVE,
    refresh: bool = _REFRESH,
    max_workers: Optional[int] = _MAX_WORKERS,
    debug: bool = _DEBUG,
) -> None:
    """Run preflight, then render and apply the infrastructure.

    Exit codes: 0 success, 1 validation failure, 2 AWS failure,
    3 deployment failure, 4 missing jsonnet/terraform.
    """
    from npk_deploy.workflow.deploy import run_deploy_workflow

    _configure_logging(debug)
    output.action(f"Deploying NPK from {settings} ...")
    rc = _run_guarded(
        lambda: run_deploy_workflow(
            settings,
            template_dir=template_dir,
            render_dir=render_dir,
            profile=profile,
            **_gate_kwargs(catalog, non_interactive, refresh, max_workers),
        )
    )
    raise typer.Exit(rc)


# ── cache command ────────────────────────────────────────────────────────────


@app.command("clear-cache")
def clear_cache() -> None:
    """Delete cached quotas and availability zones."""
    from npk_deploy.state.store import CapabilityCache

    CapabilityCache().clear()
    output.success("Capability cache cleared.")


# ── Entry point ──────────────────────────────────────────────────────────────


def main() -> int:
    """Run the CLI and return an exit code."""
    try:
        app()
        return 0
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 0


if __name__ == "__main__":
    sys.exit(main())

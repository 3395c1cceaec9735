"""Orchestrator for NPK deployment.

Two-phase execution model:

1. **Preflight**: load settings and the family catalog, then run the
   :class:`~npk_deploy.workflow.gate.PrerequisiteGate` (settings, regions,
   quotas, zones, spot role, DNS).
2. **Deploy**: hand the frozen snapshot to a deployment sink.

A fatal preflight error aborts before the sink is touched; no partial
snapshot is ever deployed.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple

from npk_deploy import ui
from npk_deploy.aws.context import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_READ_TIMEOUT,
    AWSContext,
    resolve_profile,
)
from npk_deploy.aws.probe import CapabilityProbe
from npk_deploy.config.catalog import (
    DEFAULT_CATALOG_PATH,
    distinct_quota_codes,
    load_family_catalog,
)
from npk_deploy.config.models import Settings
from npk_deploy.config.settings import DEFAULT_SETTINGS_PATH, load_settings
from npk_deploy.errors import PreflightError, ProbeFailed
from npk_deploy.sink.base import DeploymentSink
from npk_deploy.sink.terraform import DEFAULT_RENDER_DIR, TerraformSink
from npk_deploy.state.models import CheckStatus, PreflightReport, ValidatedSettings
from npk_deploy.state.store import CapabilityCache, write_preflight_report, write_snapshot
from npk_deploy.workflow.gate import PrerequisiteGate, ProbeFactory

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_VALIDATION_FAILURE = 1
EXIT_AWS_FAILURE = 2
EXIT_DEPLOY_FAILURE = 3
EXIT_TOOLCHAIN = 4


def exit_code_for(exc: PreflightError) -> int:
    """Map a fatal preflight error to the process exit code."""
    if isinstance(exc, ProbeFailed):
        return EXIT_AWS_FAILURE
    return EXIT_VALIDATION_FAILURE


def make_probe_factory(
    report: PreflightReport,
    *,
    profile: Optional[str] = None,
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT,
    read_timeout: int = DEFAULT_READ_TIMEOUT,
) -> ProbeFactory:
    """Return a factory that authenticates once settings are validated.

    The explicit *profile* wins over ``awsProfile`` from the settings.
    Identity details are copied onto *report*.
    """

    def factory(settings: Settings) -> CapabilityProbe:
        resolved = resolve_profile(profile, settings.awsProfile)
        try:
            aws_ctx = AWSContext.build(
                resolved,
                connect_timeout=connect_timeout,
                read_timeout=read_timeout,
            )
        except RuntimeError as exc:
            raise ProbeFailed(
                "get-caller-identity",
                str(exc),
                remediation="Check the 'awsProfile' setting and your AWS credentials.",
            ) from exc

        report.aws_profile = aws_ctx.profile or ""
        report.account_id = aws_ctx.account_id
        report.caller_arn = aws_ctx.caller_arn
        logger.info(
            "AWS context: account=%s arn=%s", aws_ctx.account_id, aws_ctx.caller_arn,
        )
        return CapabilityProbe(aws_ctx)

    return factory


def _print_checks(report: PreflightReport) -> None:
    for chk in report.checks:
        if chk.status == CheckStatus.PASS:
            ui.ok(chk.id)
        elif chk.status == CheckStatus.WARN:
            ui.warn(f"{chk.id}: {chk.remediation}")
        else:
            ui.fail(f"{chk.id}: {chk.details.get('error', '')}")
            if chk.remediation:
                ui.info(chk.remediation)


def run_preflight(
    settings_path: str | Path = DEFAULT_SETTINGS_PATH,
    *,
    catalog_path: str | Path = DEFAULT_CATALOG_PATH,
    profile: Optional[str] = None,
    non_interactive: bool = False,
    refresh: bool = False,
    max_workers: Optional[int] = None,
    probe_factory: Optional[ProbeFactory] = None,
    cache: Optional[CapabilityCache] = None,
) -> Tuple[int, Optional[ValidatedSettings], PreflightReport]:
    """Run the full preflight and return ``(exit_code, snapshot, report)``.

    *snapshot* is *None* whenever the exit code is not ``EXIT_SUCCESS``.
    The report is always written to the config directory.
    """
    report = PreflightReport()
    ui.phase("PREFLIGHT")

    try:
        raw = load_settings(settings_path)
        quota_codes = distinct_quota_codes(load_family_catalog(catalog_path))
    except PreflightError as exc:
        report.add(exc.check_id, CheckStatus.FAIL, remediation=exc.remediation, error=str(exc))
        write_preflight_report(report)
        ui.error_msg(str(exc))
        if exc.remediation:
            ui.info(exc.remediation)
        return EXIT_VALIDATION_FAILURE, None, report

    gate = PrerequisiteGate(
        raw,
        probe_factory or make_probe_factory(report, profile=profile),
        quota_codes,
        confirm=ui.refuse if non_interactive else ui.confirm_phrase,
        cache=cache if cache is not None else CapabilityCache(),
        refresh=refresh,
        max_workers=max_workers,
        report=report,
    )

    try:
        snapshot = gate.run()
    except PreflightError as exc:
        _print_checks(report)
        write_preflight_report(report)
        return exit_code_for(exc), None, report

    _print_checks(report)
    write_preflight_report(report)
    write_snapshot(snapshot, report.run_id)
    ui.ok(
        f"All prerequisites finished: {len(snapshot.regions)} usable region(s), "
        f"max quota {gate.max_quota:g}"
    )
    if report.has_warnings:
        ui.warn(
            f"Finished with {len(report.warned_checks)} warning(s): "
            + ", ".join(c.id for c in report.warned_checks)
        )
    return EXIT_SUCCESS, snapshot, report


def run_preflight_only(
    settings_path: str | Path = DEFAULT_SETTINGS_PATH,
    **kwargs,
) -> int:
    """Run preflight validation only; nothing is deployed."""
    rc, _snapshot, _report = run_preflight(settings_path, **kwargs)
    return rc


def run_deploy_workflow(
    settings_path: str | Path = DEFAULT_SETTINGS_PATH,
    *,
    template_dir: str | Path = ".",
    render_dir: str | Path = DEFAULT_RENDER_DIR,
    profile: Optional[str] = None,
    sink: Optional[DeploymentSink] = None,
    **kwargs,
) -> int:
    """End-to-end deployment: preflight -> sink.

    Returns one of the ``EXIT_*`` constants.
    """
    rc, snapshot, report = run_preflight(settings_path, profile=profile, **kwargs)
    if rc != EXIT_SUCCESS or snapshot is None:
        logger.error("Preflight aborted; nothing was deployed.")
        return rc

    ui.phase("DEPLOY")
    ui.step("Generating infrastructure configurations.")
    if sink is None:
        sink = TerraformSink(
            template_dir,
            render_dir=render_dir,
            profile=report.aws_profile or profile,
        )

    result = sink.deploy(snapshot)
    if result.toolchain_missing:
        ui.fail(result.stderr)
        return EXIT_TOOLCHAIN
    if not result.success:
        ui.fail(f"Failed to apply configuration: {result.command}")
        if result.stderr:
            ui.info(result.stderr)
        return EXIT_DEPLOY_FAILURE

    ui.success_panel("NPK deployed", "NPK successfully deployed. Happy hunting.")
    return EXIT_SUCCESS

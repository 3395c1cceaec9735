"""Orchestration workflows (prerequisite gate, preflight, deploy)."""

from npk_deploy.workflow.deploy import (
    EXIT_AWS_FAILURE,
    EXIT_DEPLOY_FAILURE,
    EXIT_SUCCESS,
    EXIT_TOOLCHAIN,
    EXIT_VALIDATION_FAILURE,
    exit_code_for,
    make_probe_factory,
    run_deploy_workflow,
    run_preflight,
    run_preflight_only,
)
from npk_deploy.workflow.gate import GateStage, PrerequisiteGate

__all__ = [
    "EXIT_AWS_FAILURE",
    "EXIT_DEPLOY_FAILURE",
    "EXIT_SUCCESS",
    "EXIT_TOOLCHAIN",
    "EXIT_VALIDATION_FAILURE",
    "GateStage",
    "PrerequisiteGate",
    "exit_code_for",
    "make_probe_factory",
    "run_deploy_workflow",
    "run_preflight",
    "run_preflight_only",
]

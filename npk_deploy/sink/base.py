"""Deployment sink contract.

The sink turns a validated settings snapshot into infrastructure.  The
preflight pipeline only ever hands it a fully built
:class:`~npk_deploy.state.models.ValidatedSettings`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from npk_deploy.state.models import ValidatedSettings


@dataclass
class SinkResult:
    """Parsed outcome of one sink invocation."""

    command: str
    returncode: int
    stdout: str = ""
    stderr: str = ""
    success: bool = False
    toolchain_missing: bool = False


class DeploymentSink(Protocol):
    def deploy(self, snapshot: ValidatedSettings) -> SinkResult:
        ...

"""Deployment sinks consuming the validated settings snapshot."""

from npk_deploy.sink.base import DeploymentSink, SinkResult
from npk_deploy.sink.terraform import (
    DEFAULT_ENTRYPOINT,
    DEFAULT_RENDER_DIR,
    SNAPSHOT_FILENAME,
    TerraformSink,
)

__all__ = [
    "DEFAULT_ENTRYPOINT",
    "DEFAULT_RENDER_DIR",
    "DeploymentSink",
    "SNAPSHOT_FILENAME",
    "SinkResult",
    "TerraformSink",
]

"""jsonnet + Terraform deployment sink.

Wraps the ``jsonnet`` and ``terraform`` CLIs as subprocesses so the Python
control plane never reimplements templating or apply logic:

1. Write the snapshot to ``<render_dir>/validated_settings.json``.
2. Remove stale ``*.tf.json`` and render
   ``jsonnet -m <render_dir> --ext-code-file validatedSettings=... <entrypoint>``.
3. ``terraform init`` then ``terraform apply -auto-approve`` in *render_dir*.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

from npk_deploy.sink.base import SinkResult
from npk_deploy.state.models import ValidatedSettings

logger = logging.getLogger(__name__)

SNAPSHOT_FILENAME = "validated_settings.json"
DEFAULT_ENTRYPOINT = "terraform.jsonnet"
DEFAULT_RENDER_DIR = "render-npk"

#: Return code reported when a binary is not on PATH.
TOOLCHAIN_MISSING_RC = 4


def _run(
    cmd: List[str],
    *,
    cwd: Optional[Path] = None,
    profile: Optional[str] = None,
) -> SinkResult:
    """Run *cmd* and return a :class:`SinkResult`.

    *profile* is injected as ``AWS_PROFILE`` in the subprocess env.
    """
    env: Dict[str, str] = {**os.environ}
    if profile:
        env["AWS_PROFILE"] = profile

    command = " ".join(cmd)
    logger.info("Running: %s", command)

    try:
        proc = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            env=env,
            cwd=str(cwd) if cwd else None,
        )
    except FileNotFoundError:
        return SinkResult(
            command=command,
            returncode=TOOLCHAIN_MISSING_RC,
            stderr=f"{cmd[0]} not found on PATH",
            toolchain_missing=True,
        )

    result = SinkResult(
        command=command,
        returncode=proc.returncode,
        stdout=proc.stdout.strip(),
        stderr=proc.stderr.strip(),
        success=proc.returncode == 0,
    )
    if not result.success:
        logger.error(
            "%s failed (rc=%d): %s",
            cmd[0],
            result.returncode,
            result.stderr or result.stdout or "(no output)",
        )
    return result


class TerraformSink:
    """Render the templates with jsonnet and apply them with Terraform.

    Args:
        template_dir: Directory holding *entrypoint* and its imports.
        render_dir: Output directory for rendered ``*.tf.json`` files.
        profile: AWS profile exported to the subprocesses.
    """

    def __init__(
        self,
        template_dir: str | Path = ".",
        *,
        render_dir: str | Path = DEFAULT_RENDER_DIR,
        entrypoint: str = DEFAULT_ENTRYPOINT,
        profile: Optional[str] = None,
        jsonnet_bin: str = "jsonnet",
        terraform_bin: str = "terraform",
    ) -> None:
        self.template_dir = Path(template_dir)
        self.render_dir = Path(render_dir)
        self.entrypoint = entrypoint
        self.profile = profile
        self.jsonnet_bin = jsonnet_bin
        self.terraform_bin = terraform_bin

    def write_snapshot(self, snapshot: ValidatedSettings) -> Path:
        self.render_dir.mkdir(parents=True, exist_ok=True)
        dest = self.render_dir / SNAPSHOT_FILENAME
        dest.write_text(snapshot.to_sorted_json() + "\n", encoding="utf-8")
        return dest

    def clean(self) -> None:
        """Remove previously rendered configurations."""
        for stale in self.render_dir.glob("*.tf.json"):
            stale.unlink()

    def render(self, snapshot: ValidatedSettings) -> SinkResult:
        snapshot_path = self.write_snapshot(snapshot)
        self.clean()
        return _run(
            [
                self.jsonnet_bin,
                "-m", str(self.render_dir.resolve()),
                "--ext-code-file", f"validatedSettings={snapshot_path.resolve()}",
                str(self.template_dir / self.entrypoint),
            ],
        )

    def apply(self) -> SinkResult:
        init = _run(
            [self.terraform_bin, "init", "-input=false"],
            cwd=self.render_dir,
            profile=self.profile,
        )
        if not init.success:
            return init
        return _run(
            [self.terraform_bin, "apply", "-auto-approve", "-input=false"],
            cwd=self.render_dir,
            profile=self.profile,
        )

    def deploy(self, snapshot: ValidatedSettings) -> SinkResult:
        """Render then apply; stops at the first failing command."""
        rendered = self.render(snapshot)
        if not rendered.success:
            logger.error("Failed to generate configurations.")
            return rendered
        logger.info("Configurations updated successfully. Preparing to deploy.")
        return self.apply()

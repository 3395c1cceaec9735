"""Spot service-linked role check.

The deployment templates create ``AWSServiceRoleForEC2Spot`` when it is
missing, so an absent role is a recorded outcome, never a failure.
"""

from __future__ import annotations

import logging

from npk_deploy.aws.probe import CapabilityProbe
from npk_deploy.errors import ProbeFailed
from npk_deploy.state.models import CheckResult, CheckStatus

logger = logging.getLogger(__name__)

SPOT_SERVICE_LINKED_ROLE = "AWSServiceRoleForEC2Spot"
SPOT_ROLE_CHECK_ID = "iam.spot_role"


def check_spot_role(
    probe: CapabilityProbe, role_name: str = SPOT_SERVICE_LINKED_ROLE,
) -> CheckResult:
    """Look up the spot service-linked role.

    Returns PASS with ``exists=True`` when found, WARN with
    ``exists=False`` when the lookup fails for any reason.
    """
    try:
        role = probe.get_role(role_name)
    except ProbeFailed as exc:
        logger.info("EC2 spot SLR is not present: %s", exc.detail)
        return CheckResult(
            id=SPOT_ROLE_CHECK_ID,
            status=CheckStatus.WARN,
            details={"role": role_name, "exists": False, "error": exc.detail},
            remediation=(
                f"{role_name} is not present; it will be created during deployment."
            ),
        )

    return CheckResult(
        id=SPOT_ROLE_CHECK_ID,
        status=CheckStatus.PASS,
        details={"role": role_name, "exists": True, "arn": role.get("Arn", "")},
    )

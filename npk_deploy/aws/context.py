"""AWS context: session, identity, and per-region client creation.

Wraps boto3 session creation and STS ``get-caller-identity`` into a single
:class:`AWSContext` that every probe depends on.

Profile resolution precedence:
1. Explicit ``--profile`` CLI flag
2. ``awsProfile`` from the settings document
3. ``AWS_PROFILE`` env var
4. The default boto3 credential chain
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field
from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

#: Region used for account-wide calls (region listing, STS).
DISCOVERY_REGION = "us-east-1"

DEFAULT_CONNECT_TIMEOUT = 10
DEFAULT_READ_TIMEOUT = 30


def resolve_profile(*candidates: Optional[str]) -> Optional[str]:
    """Return the first non-empty profile from *candidates*, then ``AWS_PROFILE``.

    Returns *None* when nothing is set, letting boto3 fall back to its
    default credential chain.
    """
    for candidate in candidates:
        if candidate:
            return candidate
    return os.environ.get("AWS_PROFILE") or None


def probe_config(
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT,
    read_timeout: int = DEFAULT_READ_TIMEOUT,
) -> Config:
    """Return the botocore :class:`Config` used by every capability probe.

    Retries are disabled: a flaky call surfaces as a probe failure.
    """
    return Config(
        connect_timeout=connect_timeout,
        read_timeout=read_timeout,
        retries={"total_max_attempts": 1, "mode": "standard"},
    )


@dataclass
class AWSContext:
    """AWS identity plus a thread-safe client factory.

    Attributes:
        profile: Resolved AWS profile name, or *None* for the default chain.
        account_id: 12-digit AWS account ID.
        caller_arn: Full ARN from ``sts:GetCallerIdentity``.
        config: botocore config applied to every client.
    """

    profile: Optional[str] = None
    account_id: str = ""
    caller_arn: str = ""
    config: Config = field(default_factory=probe_config, repr=False)
    _session: Any = field(default=None, repr=False, compare=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    # -- factory ----------------------------------------------------------

    @classmethod
    def build(
        cls,
        profile: Optional[str] = None,
        *,
        connect_timeout: int = DEFAULT_CONNECT_TIMEOUT,
        read_timeout: int = DEFAULT_READ_TIMEOUT,
    ) -> "AWSContext":
        """Construct an :class:`AWSContext` by calling STS.

        Raises :class:`RuntimeError` on credential / network failures.
        """
        resolved_profile = resolve_profile(profile)
        config = probe_config(connect_timeout, read_timeout)

        try:
            session = boto3.Session(
                profile_name=resolved_profile, region_name=DISCOVERY_REGION,
            )
            identity = session.client("sts", config=config).get_caller_identity()
        except (BotoCoreError, ClientError) as exc:
            raise RuntimeError(
                f"AWS credentials invalid or inaccessible (profile={resolved_profile}): {exc}"
            ) from exc

        return cls(
            profile=resolved_profile,
            account_id=identity["Account"],
            caller_arn=identity["Arn"],
            config=config,
            _session=session,
        )

    # -- session accessor -------------------------------------------------

    @property
    def session(self) -> boto3.Session:
        """Return the cached :class:`boto3.Session`."""
        with self._lock:
            if self._session is None:
                self._session = boto3.Session(
                    profile_name=self.profile, region_name=DISCOVERY_REGION,
                )
            return self._session

    def client(self, service: str, region: Optional[str] = None) -> Any:
        """Create a boto3 client for *service* in *region*.

        Sessions are not thread-safe, so client creation is serialised;
        the returned clients are safe to use from worker threads.
        """
        session = self.session
        with self._lock:
            return session.client(
                service, region_name=region or DISCOVERY_REGION, config=self.config,
            )

"""Pydantic models for the NPK settings document and family catalog.

The settings document (``npk-settings.json``) is a flat mapping.  Only the
keys in :data:`ALLOWED_SETTINGS` are recognised; the values other than
``route53Zone`` and ``awsProfile`` are opaque and passed straight through
to the deployment templates.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


ALLOWED_SETTINGS: List[str] = [
    "campaign_data_ttl",
    "campaign_max_price",
    "georestrictions",
    "route53Zone",
    "awsProfile",
    "criticalEventsSMS",
    "adminEmail",
    "sAMLMetadataFile",
    "sAMLMetadataUrl",
    "primaryRegion",
]

#: Keys from the v2 settings format.  v2.5+ cannot upgrade in place.
LEGACY_SETTINGS: List[str] = [
    "useCustomDNS",
    "useSAML",
    "dnsNames",
    "backend_bucket",
]

#: Keys consumed by the tooling itself rather than the templates.
_LOCAL_ONLY_SETTINGS = frozenset({"awsProfile"})


class Settings(BaseModel):
    """A whitelisted settings document."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    campaign_data_ttl: Optional[Any] = None
    campaign_max_price: Optional[Any] = None
    georestrictions: Optional[Any] = None
    route53Zone: Optional[str] = None
    awsProfile: Optional[str] = None
    criticalEventsSMS: Optional[Any] = None
    adminEmail: Optional[Any] = None
    sAMLMetadataFile: Optional[Any] = None
    sAMLMetadataUrl: Optional[Any] = None
    primaryRegion: Optional[Any] = None

    def passthrough(self) -> Dict[str, Any]:
        """Return the values forwarded to the templates (unset keys omitted)."""
        return {
            key: value
            for key, value in self.model_dump(exclude_none=True).items()
            if key not in _LOCAL_ONLY_SETTINGS
        }


class InstanceFamily(BaseModel):
    """One entry of the GPU instance family catalog."""

    model_config = ConfigDict(extra="allow")

    quota_code: str = Field(alias="quotaCode")

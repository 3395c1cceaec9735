"""Settings loading, allow-list validation, and the family catalog."""

from npk_deploy.config.catalog import (
    DEFAULT_CATALOG_PATH,
    distinct_quota_codes,
    load_family_catalog,
)
from npk_deploy.config.models import (
    ALLOWED_SETTINGS,
    LEGACY_SETTINGS,
    InstanceFamily,
    Settings,
)
from npk_deploy.config.settings import (
    DEFAULT_SETTINGS_PATH,
    find_invalid_keys,
    load_settings,
    validate_settings,
)

__all__ = [
    "ALLOWED_SETTINGS",
    "DEFAULT_CATALOG_PATH",
    "DEFAULT_SETTINGS_PATH",
    "InstanceFamily",
    "LEGACY_SETTINGS",
    "Settings",
    "distinct_quota_codes",
    "find_invalid_keys",
    "load_family_catalog",
    "load_settings",
    "validate_settings",
]

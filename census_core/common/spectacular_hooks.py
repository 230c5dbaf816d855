# census_core/common/spectacular_hooks.py
from __future__ import annotations

PRIMARY_PREFIX = "/api/v1/"


def preprocess_exclude_legacy_api(endpoints):
    """Drop routes served only through the unversioned /api/ alias."""
    return [
        endpoint
        for endpoint in endpoints
        if not endpoint[0].startswith("/api/") or endpoint[0].startswith(PRIMARY_PREFIX)
    ]

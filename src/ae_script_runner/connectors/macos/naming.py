"""
User-facing names for After Effects bundle identifiers
"""

import re

NEWEST_BUNDLE_ID = "com.adobe.AfterEffects.application"
VERSIONED_BUNDLE_ID = "com.adobe.AfterEffects"
GENERIC_BUNDLE_ID = "com.adobe.aftereffects"

_LEGACY_YEARS = ("2023", "2022", "2021")
_TRAILING_YEAR = re.compile(r"\.(\d{4})$")


def bundle_id_to_display_name(bundle_id: str) -> str:
    """Convert a bundle identifier to a user-friendly display name"""
    # AE 2025+ naming convention
    if bundle_id == NEWEST_BUNDLE_ID:
        return "After Effects 2025+"

    if bundle_id == VERSIONED_BUNDLE_ID:
        return "After Effects 2024"

    for year in _LEGACY_YEARS:
        if f".{year}" in bundle_id:
            return f"After Effects {year}"

    if bundle_id == GENERIC_BUNDLE_ID:
        return "After Effects (Generic)"

    match = _TRAILING_YEAR.search(bundle_id)
    if match:
        return f"After Effects {match.group(1)}"

    return bundle_id

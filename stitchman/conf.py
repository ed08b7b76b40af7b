"""
Stitchman Settings.

Supports two formats (dict takes priority):

    # Option 1: Dict
    STITCHMAN = {
        "MINUTES_PER_POINT": 10,
        "DEFAULT_PRESET": "this-week",
    }

    # Option 2: Flat
    STITCHMAN_MINUTES_PER_POINT = 10
    STITCHMAN_DEFAULT_PRESET = "this-week"

All settings have defaults; zero configuration required.
"""

from django.conf import settings


# ── Defaults ──

DEFAULTS = {
    # Capacity estimate only, not a scheduling guarantee
    "MINUTES_PER_POINT": 10,
    "DEFAULT_PRESET": "today",
    "TRAILING_DAYS": 30,
}


# ── Accessors ──

_sentinel = object()


def get_setting(name, default=_sentinel):
    """
    Get a stitchman setting.

    Looks up in order:
    1. STITCHMAN dict (e.g. STITCHMAN = {"MINUTES_PER_POINT": 12})
    2. Flat setting (e.g. STITCHMAN_MINUTES_PER_POINT = 12)
    3. DEFAULTS
    """
    stitchman_dict = getattr(settings, "STITCHMAN", {})
    if name in stitchman_dict:
        return stitchman_dict[name]

    flat_value = getattr(settings, f"STITCHMAN_{name}", _sentinel)
    if flat_value is not _sentinel:
        return flat_value

    if default is not _sentinel:
        return default

    return DEFAULTS.get(name)


def get_minutes_per_point() -> int:
    return int(get_setting("MINUTES_PER_POINT"))


def get_trailing_days() -> int:
    return int(get_setting("TRAILING_DAYS"))


def get_default_preset() -> str:
    return get_setting("DEFAULT_PRESET")

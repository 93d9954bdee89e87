"""
Layout settings: defaults, YAML loading and validation.
"""
import os

import yaml

from engine.errors import LayoutConfigError


def get_default_layout_settings():
    """Return default layout settings."""
    return {
        'elimination': {
            'link_width': 50,
            'cell_height': 65,
            'min_cell_width': 175,
            'max_cell_width': 250,
            'third_place_match_label_height': 20,
            'bracket_size': 2048,
            'header_height': 0,
            'header_spacing': 8,
        },
        'round_robin': {
            'row_height': 45,
            'row_width': 125,
            'gap': 4,
        },
        'swiss': {
            'row_height': 50,
            'row_gap': 5,
            'hold_delay_ms': 5000,
            'scroll_duration_ms': 750,
        },
    }


# Keys allowed to be zero; everything else must be strictly positive
_ZERO_ALLOWED = {'header_height', 'header_spacing', 'gap', 'row_gap', 'hold_delay_ms',
                 'scroll_duration_ms', 'link_width', 'third_place_match_label_height'}


def merge_layout_settings(overrides):
    """Merge a partial settings dict over the defaults, section by section."""
    settings = get_default_layout_settings()
    if not overrides:
        return settings
    if not isinstance(overrides, dict):
        raise LayoutConfigError(f"Layout settings must be a mapping, got {type(overrides).__name__}")
    for section, values in overrides.items():
        if section not in settings:
            raise LayoutConfigError(f"Unknown layout settings section \"{section}\"")
        if values is None:
            continue
        if not isinstance(values, dict):
            raise LayoutConfigError(f"Layout settings section \"{section}\" must be a mapping")
        for key, value in values.items():
            if key not in settings[section]:
                raise LayoutConfigError(f"Unknown layout setting \"{section}.{key}\"")
            settings[section][key] = value
    validate_layout_settings(settings)
    return settings


def validate_layout_settings(settings):
    """Raise LayoutConfigError if any value is out of range."""
    for section, values in settings.items():
        for key, value in values.items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise LayoutConfigError(f"Layout setting \"{section}.{key}\" must be a number, got {value!r}")
            if value < 0 or (value == 0 and key not in _ZERO_ALLOWED):
                raise LayoutConfigError(f"Layout setting \"{section}.{key}\" must be positive, got {value}")

    elimination = settings['elimination']
    if elimination['min_cell_width'] > elimination['max_cell_width']:
        raise LayoutConfigError(
            f"min_cell_width ({elimination['min_cell_width']}) is greater than "
            f"max_cell_width ({elimination['max_cell_width']})")


def load_layout_settings(path=None):
    """Load layout settings from a YAML file, merging with defaults."""
    if not path or not os.path.exists(path):
        return get_default_layout_settings()
    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise LayoutConfigError(f"Failed to parse {path}: {e}")
    return merge_layout_settings(data)


def section(settings, name):
    """One section of a settings dict, falling back to the defaults."""
    if settings is None:
        return get_default_layout_settings()[name]
    return settings[name]

"""Built-in platform profiles for the final Markdown polish."""

from __future__ import annotations

from typing import Any

from .config import DistillConfig, ProfileName

PROFILES: dict[ProfileName, dict[str, Any]] = {
    ProfileName.DEFAULT: {
        "postprocess": {
            "platform": "default",
            "table_of_contents": False,
        },
    },
    ProfileName.GITHUB: {
        # README-style output with an anchor-linked table of contents
        "postprocess": {
            "platform": "github",
            "table_of_contents": True,
        },
    },
    ProfileName.OBSIDIAN: {
        # Obsidian resolves [[#Heading]] links itself, so no generated TOC
        "postprocess": {
            "platform": "obsidian",
            "table_of_contents": False,
        },
    },
    ProfileName.CUSTOM: {
        # No overrides - use explicit config
    },
}


def apply_profile(config: DistillConfig) -> DistillConfig:
    """
    Apply profile defaults to config, preserving user overrides.

    Profile values override Pydantic defaults, but values the user set
    explicitly take precedence over profile values.

    Args:
        config: The configuration with a profile specified

    Returns:
        A new DistillConfig with profile defaults applied

    Example:
        >>> config = DistillConfig(profile=ProfileName.GITHUB)
        >>> apply_profile(config).postprocess.table_of_contents
        True
    """
    if config.profile == ProfileName.CUSTOM:
        return config

    profile_overrides = PROFILES.get(config.profile, {})
    if not profile_overrides:
        return config

    config_dict = config.model_dump()
    explicit = _explicit_fields(config)

    def deep_update(base: dict, overrides: dict, user_set: dict) -> dict:
        """Recursively merge overrides into base, skipping keys the user set."""
        result = base.copy()
        for key, override_value in overrides.items():
            if key in result and isinstance(result[key], dict) and isinstance(override_value, dict):
                nested = user_set.get(key, {})
                if nested is True:
                    continue
                result[key] = deep_update(result[key], override_value, nested)
            elif key not in user_set:
                result[key] = override_value
        return result

    merged = deep_update(config_dict, profile_overrides, explicit)
    return DistillConfig.model_validate(merged)


def _explicit_fields(model: Any) -> dict:
    """Map of fields the user set explicitly, nested for sub-models."""
    fields: dict = {}
    for name in model.model_fields_set:
        value = getattr(model, name)
        fields[name] = _explicit_fields(value) if hasattr(value, "model_fields_set") else True
    return fields

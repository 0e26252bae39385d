"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, formgate.toml only contains
overrides. An empty file (or none at all) is a valid configuration.
"""

from __future__ import annotations

from pydantic import BaseModel

# --- formgate.toml sections ---


class FormConfig(BaseModel):
    """[form] section — defaults for new stores and field bindings."""

    model_config = {"frozen": True}

    validate_on_submit: bool = True
    validate_on_change: bool = False
    validate_on_blur: bool = True


class A11yConfig(BaseModel):
    """[a11y] section — accessibility bridge behavior."""

    model_config = {"frozen": True}

    announce: bool = True
    focus_first_invalid: bool = True
    summary_template: str = "{count} field(s) need attention. {first}"


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True

"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, metaschema.toml only contains
overrides. A typical project needs only ``[registry] fragments``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- metaschema.toml sections ---


class RegistryConfig(BaseModel):
    """[registry] section."""

    model_config = {"frozen": True}

    fragments: str | None = None
    process: bool = True


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    entry_points: bool = True


# --- Root config ---


class MetaschemaConfig(BaseModel):
    """Root configuration model — mirrors metaschema.toml structure."""

    model_config = {"frozen": True}

    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

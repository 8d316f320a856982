"""Configuration system for DocTransplant.

Layered config loading (lowest to highest priority):
1. config/default.toml (shipped with package)
2. ~/.config/dtp/config.toml (user-level)
3. ./dtp.toml (project-level)
4. Environment variables (DTP_ALIGN__STRATEGY, DTP_REWRITE__PAIRING, etc.)
5. CLI flags
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

_PACKAGE_ROOT = Path(__file__).resolve().parent.parent.parent.parent
_DEFAULT_CONFIG = _PACKAGE_ROOT / "config" / "default.toml"
_USER_CONFIG = Path.home() / ".config" / "dtp" / "config.toml"
_PROJECT_CONFIG = Path("dtp.toml")


class AlignConfig(BaseModel):
    """Alignment strategy and its empirical tuning constants."""

    strategy: Literal["adaptive", "strict"] = "adaptive"

    # Tier 2: sequential bounded-window match
    window_size: int = 5
    anchor_weight: float = 0.4
    position_weight: float = 0.3
    position_decay: float = 0.1  # per window slot
    length_weight: float = 0.3
    length_floor: float = 0.3  # length ratio below this earns no bonus
    length_scale: float = 0.3  # bonus = ratio * length_scale, then weighted
    accept_threshold: float = 0.2
    confident_threshold: float = 0.6  # accepted matches below this count as fuzzy

    # Tier 3: residual anchor/similarity match
    residual_anchor_weight: float = 0.5
    residual_similarity_weight: float = 0.5
    residual_threshold: float = 0.3
    residual_prefix: int = 100  # normalized characters compared per side

    # String similarity
    long_text_limit: int = 500  # above this, word overlap replaces Levenshtein
    length_gap_cutoff: float = 0.8


class RewriteConfig(BaseModel):
    pairing: Literal["index", "verify"] = "index"
    flag_unmatched: bool = True
    docx_highlight: str = "red"  # w:highlight value
    pptx_highlight: str = "FF0000"  # a:srgbClr value


class OutputConfig(BaseModel):
    suffix: str = "translated"
    review: bool = False


class DTPConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DTP_",
        env_nested_delimiter="__",
    )

    align: AlignConfig = AlignConfig()
    rewrite: RewriteConfig = RewriteConfig()
    output: OutputConfig = OutputConfig()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # CLI flags (init kwargs) > env vars > TOML files > field defaults
        return init_settings, env_settings, TomlLayersSource(settings_cls)


class TomlLayersSource(PydanticBaseSettingsSource):
    """Settings source that merges the TOML layers, lowest priority first."""

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        # Unused: __call__ returns the whole merged mapping at once
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        config_data: dict = {}
        for path in (_DEFAULT_CONFIG, _USER_CONFIG, _PROJECT_CONFIG):
            layer = _load_toml(path)
            config_data = _deep_merge(config_data, layer)

        # Flatten 'general' section into top-level
        if "general" in config_data:
            general = config_data.pop("general")
            config_data = _deep_merge(config_data, general)
        return config_data


def _load_toml(path: Path) -> dict:
    """Load a TOML file if it exists, return empty dict otherwise."""
    if path.is_file():
        with open(path, "rb") as f:
            return tomllib.load(f)
    return {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(**cli_overrides: object) -> DTPConfig:
    """Load configuration from all layers and merge.

    Args:
        **cli_overrides: Direct overrides from CLI flags. Keys can be
            dot-separated (e.g. align.strategy="strict").
    """
    # Layer 5: CLI overrides (dot-separated keys), passed as init kwargs
    config_data: dict = {}
    for key, value in cli_overrides.items():
        if value is None:
            continue
        parts = key.split(".")
        target = config_data
        for part in parts[:-1]:
            target = target.setdefault(part, {})
        target[parts[-1]] = value

    # Layers 1-4: TOML files and env vars are sources of DTPConfig itself
    return DTPConfig(**config_data)

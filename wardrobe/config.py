"""Centralized configuration for the wardrobe gateway.

All settings are read from the environment exactly once, in
``Settings.from_env()``. The resulting frozen object is handed to
``create_app()`` and from there to every client and service constructor.
"""

import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

# =============================================================================
# Record store field maps
# =============================================================================

# Each logical field maps to candidate store field names, primary first.
# Reads accept the first candidate present; writes and formulas use the primary.
DEFAULT_CLOSET_FIELDS: dict[str, tuple[str, ...]] = {
    "name": ("Name", "Item Name"),
    "category": ("Category",),
    "color": ("Color",),
    "brand": ("Brand",),
    "image_url": ("Image URL", "Photo", "Image"),
    "owner_user_id": ("Owner User Id", "ownerUserId"),
    "status": ("Status",),
}

DEFAULT_OUTFIT_FIELDS: dict[str, tuple[str, ...]] = {
    "title": ("Title", "Name"),
    "item_ids": ("Items", "Item Ids"),
    "occasion": ("Occasion",),
    "style": ("Style",),
    "weather": ("Weather",),
    "reasoning": ("Reasoning",),
    "palette": ("Palette",),
    "preview_photo": ("Preview Photo", "Photo"),
    "owner_user_id": ("Owner User Id", "ownerUserId"),
}

DEFAULT_ORDER_FIELDS: dict[str, tuple[str, ...]] = {
    "user_id": ("User Id", "userId"),
    "outfit_id": ("Outfit Id", "Outfit"),
    "status": ("Status",),
    "fulfillment": ("Fulfillment",),
    "note": ("Note",),
    "idempotency_key": ("Idempotency Key", "idempotencyKey"),
}


def _env_bool(env: Mapping[str, str], name: str, default: bool = False) -> bool:
    value = env.get(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    value = env.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    value = env.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}")


def _env_list(env: Mapping[str, str], name: str) -> tuple[str, ...]:
    raw = env.get(name, "")
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _load_field_map(
    env: Mapping[str, str],
    table: str,
    defaults: dict[str, tuple[str, ...]],
) -> Mapping[str, tuple[str, ...]]:
    """Apply AIRTABLE_FIELD_<TABLE>_<FIELD> overrides to a default field map."""
    resolved = {}
    for logical, candidates in defaults.items():
        override = _env_list(env, f"AIRTABLE_FIELD_{table}_{logical.upper()}")
        resolved[logical] = override or candidates
    return MappingProxyType(resolved)


@dataclass(frozen=True)
class FieldMaps:
    """Candidate store field names for every table."""

    closet: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_CLOSET_FIELDS))
    )
    outfits: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_OUTFIT_FIELDS))
    )
    orders: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_ORDER_FIELDS))
    )


@dataclass(frozen=True)
class Settings:
    """Immutable runtime configuration."""

    # Gateway auth
    api_key: str = ""
    require_user_id: bool = False

    # Record store
    airtable_api_key: str = ""
    airtable_base_id: str = ""
    airtable_api_url: str = "https://api.airtable.com/v0"
    table_closet: str = "Clothing Items"
    table_outfits: str = "Outfits"
    table_orders: str = "Orders"
    closet_image_as_attachment: bool = False
    fields: FieldMaps = field(default_factory=FieldMaps)

    # Completion backend
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_vision_model: str = "gpt-4o-mini"
    openai_timeout_seconds: float = 60.0
    ai_stub_outfits: bool = False

    # HTTP infrastructure
    cors_origins: tuple[str, ...] = ("*",)
    rate_limit_per_minute: int = 120
    rate_limit_burst: int = 30

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables.

        Args:
            env: Mapping to read from, defaults to ``os.environ``

        Returns:
            Frozen Settings instance

        Raises:
            ValueError: If a numeric variable cannot be parsed
        """
        env = os.environ if env is None else env

        return cls(
            api_key=env.get("OUTFITTED_API_KEY", ""),
            require_user_id=_env_bool(env, "REQUIRE_USER_ID"),
            airtable_api_key=env.get("AIRTABLE_API_KEY", ""),
            airtable_base_id=env.get("AIRTABLE_BASE_ID", ""),
            airtable_api_url=env.get(
                "AIRTABLE_API_URL", "https://api.airtable.com/v0"
            ).rstrip("/"),
            table_closet=env.get("AIRTABLE_TABLE_CLOSET") or "Clothing Items",
            table_outfits=env.get("AIRTABLE_TABLE_OUTFITS") or "Outfits",
            table_orders=env.get("AIRTABLE_TABLE_ORDERS") or "Orders",
            closet_image_as_attachment=_env_bool(env, "CLOSET_IMAGE_AS_ATTACHMENT"),
            fields=FieldMaps(
                closet=_load_field_map(env, "CLOSET", DEFAULT_CLOSET_FIELDS),
                outfits=_load_field_map(env, "OUTFITS", DEFAULT_OUTFIT_FIELDS),
                orders=_load_field_map(env, "ORDERS", DEFAULT_ORDER_FIELDS),
            ),
            openai_api_key=env.get("OPENAI_API_KEY", ""),
            openai_model=env.get("OPENAI_MODEL") or "gpt-4o-mini",
            openai_vision_model=env.get("OPENAI_VISION_MODEL") or "gpt-4o-mini",
            openai_timeout_seconds=_env_float(env, "OPENAI_TIMEOUT_SECONDS", 60.0),
            ai_stub_outfits=_env_bool(env, "AI_STUB_OUTFITS"),
            cors_origins=_env_list(env, "CORS_ORIGINS") or ("*",),
            rate_limit_per_minute=_env_int(env, "RATE_LIMIT_PER_MINUTE", 120),
            rate_limit_burst=_env_int(env, "RATE_LIMIT_BURST", 30),
            log_level=env.get("LOG_LEVEL") or "INFO",
            log_json=_env_bool(env, "LOG_JSON"),
        )

    def missing_credentials(self) -> list[str]:
        """Names of credentials that are not configured."""
        missing = []
        if not self.api_key:
            missing.append("OUTFITTED_API_KEY")
        if not self.airtable_api_key:
            missing.append("AIRTABLE_API_KEY")
        if not self.airtable_base_id:
            missing.append("AIRTABLE_BASE_ID")
        if not self.openai_api_key and not self.ai_stub_outfits:
            missing.append("OPENAI_API_KEY")
        return missing

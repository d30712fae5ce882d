#!/usr/bin/env python3
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from dotenv import load_dotenv

from ..ens.config import EnsConfig, DEFAULT_PARENT_NAME, ENS_REGISTRY_ADDRESS


def _env(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip()


def _env_list(name: str) -> Tuple[str, ...]:
    raw = os.environ.get(name, "")
    return tuple(item.strip().lower() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    """Centralized environment-driven settings.

    Values are read when the instance is created, so tests can monkeypatch
    the environment and build a fresh ``Settings``.
    """

    # ENS writes (Sepolia by default)
    rpc_url: str = field(default_factory=lambda: _env("SEPOLIA_RPC_URL"))
    ens_owner_private_key: str = field(default_factory=lambda: _env("ENS_OWNER_PRIVATE_KEY"), repr=False)
    ens_registry_address: str = field(default_factory=lambda: _env("ENS_REGISTRY_ADDRESS", ENS_REGISTRY_ADDRESS))
    ens_public_resolver: str = field(default_factory=lambda: _env("ENS_PUBLIC_RESOLVER"))
    ens_name_wrapper: str = field(default_factory=lambda: _env("ENS_NAME_WRAPPER"))
    ens_parent_name: str = field(default_factory=lambda: _env("ENS_PARENT_NAME", DEFAULT_PARENT_NAME))
    ens_allowed_parents: Tuple[str, ...] = field(default_factory=lambda: _env_list("ENS_ALLOWED_PARENTS"))
    ens_tx_timeout_sec: int = field(default_factory=lambda: int(_env("ENS_TX_TIMEOUT_SEC", "180")))
    ens_gas_multiplier: float = field(default_factory=lambda: float(_env("ENS_GAS_MULTIPLIER", "1.2")))

    # Token generation
    gemini_api_key: str = field(default_factory=lambda: _env("GEMINI_API_KEY"), repr=False)
    gemini_model: str = field(default_factory=lambda: _env("GEMINI_MODEL", "gemini-2.5-flash"))

    # Logo pinning
    nft_storage_key: str = field(default_factory=lambda: _env("NFT_STORAGE_KEY"), repr=False)
    nft_storage_url: str = field(default_factory=lambda: _env("NFT_STORAGE_URL", "https://api.nft.storage"))

    # Quotes and prices
    oneinch_base_url: str = field(default_factory=lambda: _env("ONEINCH_BASE_URL", "https://api.1inch.io/v5.0"))
    pyth_hermes_url: str = field(default_factory=lambda: _env("PYTH_HERMES_URL"))
    pyth_product_id: str = field(default_factory=lambda: _env("PYTH_PRODUCT_ID"))
    coingecko_url: str = field(default_factory=lambda: _env("COINGECKO_URL", "https://api.coingecko.com/api/v3"))
    http_timeout_sec: int = field(default_factory=lambda: int(_env("ED_HTTP_TIMEOUT_SEC", "30")))

    # API
    cors_origins: str = field(default_factory=lambda: _env("ED_CORS_ORIGINS", "*"))
    register_rate_limit: int = field(default_factory=lambda: int(_env("ED_REGISTER_RATE_LIMIT", "10")))
    register_window_sec: int = field(default_factory=lambda: int(_env("ED_REGISTER_WINDOW_SEC", "300")))
    host: str = field(default_factory=lambda: _env("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(_env("PORT", "5001")))

    # Logging
    log_level: str = field(default_factory=lambda: _env("ED_LOG_LEVEL", "INFO"))
    use_wandb: bool = field(default_factory=lambda: _env("ED_USE_WANDB", "0") == "1")
    wandb_project: str = field(default_factory=lambda: _env("ED_WANDB_PROJECT", "easydeploy-ai"))

    @property
    def ens_configured(self) -> bool:
        return bool(self.rpc_url and self.ens_owner_private_key)

    @property
    def cors_origin_list(self) -> list:
        if not self.cors_origins:
            return ["*"]
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def ens_config(self) -> Optional[EnsConfig]:
        """Build the injected ENS configuration, or None when ENS writes are not configured."""
        if not self.ens_configured:
            return None
        return EnsConfig(
            rpc_url=self.rpc_url,
            registry_address=self.ens_registry_address,
            private_key=self.ens_owner_private_key,
            public_resolver=self.ens_public_resolver or None,
            name_wrapper=self.ens_name_wrapper or None,
            default_parent=self.ens_parent_name,
            allowed_parents=self.ens_allowed_parents,
            tx_timeout_sec=self.ens_tx_timeout_sec,
            gas_multiplier=self.ens_gas_multiplier,
        )


def get_settings(dotenv: bool = True, env_file: Optional[str] = None) -> Settings:
    """Settings from the environment, after loading a .env file when present"""
    if dotenv:
        load_dotenv(env_file)
    return Settings()

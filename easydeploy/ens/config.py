#!/usr/bin/env python3
"""
ENS network constants and the injected workflow configuration
"""
from dataclasses import dataclass, field
from typing import Optional, Tuple

# Registry address is the same on mainnet and Sepolia; other networks differ.
ENS_REGISTRY_ADDRESS = "0x00000000000C2E074eC69A0dFb2997BA6C7d2e1e"
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
DEFAULT_PARENT_NAME = "easydeployai.eth"
RESOLVER_LOOKUP_NAME = "resolver.eth"


@dataclass(frozen=True)
class EnsConfig:
    """Everything one registration workflow instance needs to reach the chain."""
    rpc_url: str
    registry_address: str
    private_key: str = field(repr=False)
    public_resolver: Optional[str] = None
    name_wrapper: Optional[str] = None
    default_parent: str = DEFAULT_PARENT_NAME
    allowed_parents: Tuple[str, ...] = ()
    tx_timeout_sec: int = 180
    gas_multiplier: float = 1.2
    chain_id: Optional[int] = None

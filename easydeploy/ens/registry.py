#!/usr/bin/env python3
"""
Typed access to the ENS registry contract
"""
from web3 import Web3

from .abi import REGISTRY_ABI
from .chain import ChainClient


class RegistryAccessor:
    """ENS registry reads and writes through a ChainClient.

    Writes wait for inclusion and are never retried here.
    """

    def __init__(self, chain: ChainClient, registry_address: str):
        self.chain = chain
        self.address = Web3.to_checksum_address(registry_address)

    def owner_of(self, node: bytes) -> str:
        return self.chain.call(self.address, REGISTRY_ABI, "owner", [node])

    def resolver_of(self, node: bytes) -> str:
        """Resolver configured for ``node``; the zero address means unset"""
        return self.chain.call(self.address, REGISTRY_ABI, "resolver", [node])

    def set_subnode_owner(self, parent_node: bytes, label_hash: bytes, new_owner: str) -> str:
        return self.chain.transact(
            self.address, REGISTRY_ABI, "setSubnodeOwner", [parent_node, label_hash, new_owner],
            description="createSubnode",
        )

    def set_resolver_of(self, node: bytes, resolver_address: str) -> str:
        return self.chain.transact(
            self.address, REGISTRY_ABI, "setResolver", [node, resolver_address],
            description="setResolver",
        )

    def set_owner_of(self, node: bytes, new_owner: str) -> str:
        return self.chain.transact(
            self.address, REGISTRY_ABI, "setOwner", [node, new_owner],
            description="transferOwnership",
        )

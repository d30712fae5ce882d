#!/usr/bin/env python3
"""
Typed access to an ENS public resolver
"""
from web3 import Web3

from .abi import RESOLVER_ABI
from .chain import ChainClient


class ResolverAccessor:
    def __init__(self, chain: ChainClient, resolver_address: str):
        self.chain = chain
        self.address = Web3.to_checksum_address(resolver_address)

    def set_address_record(self, node: bytes, target_address: str) -> str:
        """Point ``node`` at ``target_address`` in the resolver's addr table"""
        return self.chain.transact(
            self.address, RESOLVER_ABI, "setAddr", [node, target_address],
            description="setAddr",
        )

    def address_of(self, node: bytes) -> str:
        return self.chain.call(self.address, RESOLVER_ABI, "addr", [node])

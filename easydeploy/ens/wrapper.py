#!/usr/bin/env python3
"""
NameWrapper access for parents held as ERC-1155 wrapped names
"""
from web3 import Web3

from .abi import NAME_WRAPPER_ABI
from .chain import ChainClient
from .namehash import node_to_token_id

# Capped by the NameWrapper to the parent's own expiry.
MAX_EXPIRY = 2 ** 64 - 1


class NameWrapperAccessor:
    def __init__(self, chain: ChainClient, wrapper_address: str):
        self.chain = chain
        self.address = Web3.to_checksum_address(wrapper_address)

    def is_wrapped(self, node: bytes) -> bool:
        return bool(self.chain.call(self.address, NAME_WRAPPER_ABI, "isWrapped", [node]))

    def owner_of(self, node: bytes) -> str:
        return self.chain.call(self.address, NAME_WRAPPER_ABI, "ownerOf", [node_to_token_id(node)])

    def set_subnode_record(self, parent_node: bytes, label: str, owner: str, resolver: str) -> str:
        """Create the wrapped child with owner and resolver in one transaction"""
        return self.chain.transact(
            self.address, NAME_WRAPPER_ABI, "setSubnodeRecord",
            [parent_node, label, owner, resolver, 0, 0, MAX_EXPIRY],
            description="createSubnode",
        )

    def transfer(self, node: bytes, from_address: str, to_address: str) -> str:
        return self.chain.transact(
            self.address, NAME_WRAPPER_ABI, "safeTransferFrom",
            [from_address, to_address, node_to_token_id(node), 1, b""],
            description="transferOwnership",
        )

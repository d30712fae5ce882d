#!/usr/bin/env python3
"""
ENS namehash helpers (EIP-137)
"""
from eth_utils import keccak, to_bytes

EMPTY_NODE = b"\x00" * 32


def labelhash(label: str) -> bytes:
    """keccak256 of the UTF-8 label"""
    return keccak(to_bytes(text=label))


def namehash(name: str) -> bytes:
    """Recursive ENS namehash, hashing labels right to left"""
    node = EMPTY_NODE
    if not name:
        return node
    for label in reversed(name.split(".")):
        node = keccak(node + labelhash(label))
    return node


def node_to_token_id(node: bytes) -> int:
    """NameWrapper token id for a node"""
    return int.from_bytes(node, "big")

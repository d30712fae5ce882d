#!/usr/bin/env python3
"""
Minimal ABIs for the ENS registry, public resolver and NameWrapper
"""

REGISTRY_ABI = [
    {"constant": True, "inputs": [{"name": "node", "type": "bytes32"}], "name": "owner", "outputs": [{"name": "", "type": "address"}], "type": "function"},
    {"constant": True, "inputs": [{"name": "node", "type": "bytes32"}], "name": "resolver", "outputs": [{"name": "", "type": "address"}], "type": "function"},
    {
        "constant": False,
        "inputs": [
            {"name": "node", "type": "bytes32"},
            {"name": "label", "type": "bytes32"},
            {"name": "owner", "type": "address"},
        ],
        "name": "setSubnodeOwner",
        "outputs": [{"name": "", "type": "bytes32"}],
        "type": "function",
    },
    {"constant": False, "inputs": [{"name": "node", "type": "bytes32"}, {"name": "resolver", "type": "address"}], "name": "setResolver", "outputs": [], "type": "function"},
    {"constant": False, "inputs": [{"name": "node", "type": "bytes32"}, {"name": "owner", "type": "address"}], "name": "setOwner", "outputs": [], "type": "function"},
]

# Only the (bytes32,address) overloads; the coin-type variants are left out so
# web3 never has to disambiguate.
RESOLVER_ABI = [
    {"constant": True, "inputs": [{"name": "node", "type": "bytes32"}], "name": "addr", "outputs": [{"name": "", "type": "address"}], "type": "function"},
    {"constant": False, "inputs": [{"name": "node", "type": "bytes32"}, {"name": "a", "type": "address"}], "name": "setAddr", "outputs": [], "type": "function"},
]

NAME_WRAPPER_ABI = [
    {"inputs": [{"name": "node", "type": "bytes32"}], "name": "isWrapped", "outputs": [{"name": "", "type": "bool"}], "stateMutability": "view", "type": "function"},
    {"inputs": [{"name": "id", "type": "uint256"}], "name": "ownerOf", "outputs": [{"name": "owner", "type": "address"}], "stateMutability": "view", "type": "function"},
    {
        "inputs": [
            {"name": "parentNode", "type": "bytes32"},
            {"name": "label", "type": "string"},
            {"name": "owner", "type": "address"},
            {"name": "resolver", "type": "address"},
            {"name": "ttl", "type": "uint64"},
            {"name": "fuses", "type": "uint32"},
            {"name": "expiry", "type": "uint64"},
        ],
        "name": "setSubnodeRecord",
        "outputs": [{"name": "node", "type": "bytes32"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "from", "type": "address"},
            {"name": "to", "type": "address"},
            {"name": "id", "type": "uint256"},
            {"name": "amount", "type": "uint256"},
            {"name": "data", "type": "bytes"},
        ],
        "name": "safeTransferFrom",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

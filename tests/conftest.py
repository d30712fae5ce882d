from typing import Dict, List, Optional, Set, Tuple

import pytest
from eth_utils import keccak
from web3 import Web3

from easydeploy.common.errors import ChainWriteError
from easydeploy.ens.chain import ChainClient
from easydeploy.ens.config import ZERO_ADDRESS, EnsConfig
from easydeploy.ens.namehash import labelhash, namehash, node_to_token_id
from easydeploy.ens.workflow import SubnameRegistrationWorkflow

SIGNER = "0x" + "5e" * 20
OWNER = "0x" + "0a" * 20
TOKEN = "0x" + "7c" * 20
STRANGER = "0x" + "99" * 20
REGISTRY = "0x" + "e1" * 20
RESOLVER = "0x" + "4f" * 20
WRAPPER = "0x" + "3a" * 20
PARENT = "easydeployai.eth"


class FakeChain(ChainClient):
    """In-memory registry/resolver/wrapper that records every call in order.

    Writes are permission-checked the way the contracts check them, so a
    step issued out of order reverts.
    """

    def __init__(self, address: str = SIGNER, fail_on: Optional[str] = None):
        self.address = address
        self.fail_on = fail_on
        self.owners: Dict[bytes, str] = {}
        self.resolvers: Dict[bytes, str] = {}
        self.addr_records: Dict[bytes, str] = {}
        self.wrapped: Set[bytes] = set()
        self.wrapped_owners: Dict[int, str] = {}
        self.calls: List[Tuple[str, str, tuple]] = []
        self._tx_count = 0

    @property
    def writes(self) -> List[str]:
        return [fn for kind, fn, _ in self.calls if kind == "transact"]

    def _is_signer(self, address: Optional[str]) -> bool:
        return bool(address) and address.lower() == self.address.lower()

    def _revert(self, fn: str):
        raise ChainWriteError(f"{fn} reverted")

    def call(self, contract_address, abi, fn_name, args):
        self.calls.append(("call", fn_name, tuple(args)))
        node = args[0]
        if fn_name == "owner":
            return self.owners.get(node, ZERO_ADDRESS)
        if fn_name == "resolver":
            return self.resolvers.get(node, ZERO_ADDRESS)
        if fn_name == "addr":
            return self.addr_records.get(node, ZERO_ADDRESS)
        if fn_name == "isWrapped":
            return node in self.wrapped
        if fn_name == "ownerOf":
            return self.wrapped_owners.get(node, ZERO_ADDRESS)
        raise AssertionError(f"unexpected call {fn_name}")

    def transact(self, contract_address, abi, fn_name, args, description=""):
        self.calls.append(("transact", fn_name, tuple(args)))
        if fn_name == self.fail_on:
            raise ChainWriteError(f"{description or fn_name} could not be submitted: connection dropped")

        if fn_name == "setSubnodeOwner":
            parent, label_hash, owner = args
            if not self._is_signer(self.owners.get(parent)):
                self._revert(fn_name)
            self.owners[keccak(parent + label_hash)] = owner
        elif fn_name == "setResolver":
            node, resolver = args
            if not self._is_signer(self.owners.get(node)):
                self._revert(fn_name)
            self.resolvers[node] = resolver
        elif fn_name == "setAddr":
            node, target = args
            attached = self.resolvers.get(node, ZERO_ADDRESS)
            authorized = self._is_signer(self.owners.get(node)) or self._is_signer(
                self.wrapped_owners.get(node_to_token_id(node))
            )
            if attached.lower() != contract_address.lower() or not authorized:
                self._revert(fn_name)
            self.addr_records[node] = target
        elif fn_name == "setOwner":
            node, owner = args
            if not self._is_signer(self.owners.get(node)):
                self._revert(fn_name)
            self.owners[node] = owner
        elif fn_name == "setSubnodeRecord":
            parent, label, owner, resolver = args[:4]
            if not self._is_signer(self.wrapped_owners.get(node_to_token_id(parent))):
                self._revert(fn_name)
            node = keccak(parent + labelhash(label))
            self.owners[node] = contract_address
            self.resolvers[node] = resolver
            self.wrapped_owners[node_to_token_id(node)] = owner
            self.wrapped.add(node)
        elif fn_name == "safeTransferFrom":
            sender, receiver, token_id, amount, _data = args
            if not self._is_signer(sender) or not self._is_signer(self.wrapped_owners.get(token_id)):
                self._revert(fn_name)
            self.wrapped_owners[token_id] = receiver
        else:
            raise AssertionError(f"unexpected transaction {fn_name}")

        self._tx_count += 1
        return "0x%064x" % self._tx_count

    def give_parent(self, name: str = PARENT, owner: str = SIGNER):
        self.owners[namehash(name)] = owner

    def wrap_parent(self, name: str = PARENT, owner: str = SIGNER):
        node = namehash(name)
        self.owners[node] = Web3.to_checksum_address(WRAPPER)
        self.wrapped.add(node)
        self.wrapped_owners[node_to_token_id(node)] = owner


@pytest.fixture
def chain() -> FakeChain:
    fake = FakeChain()
    fake.give_parent()
    return fake


@pytest.fixture
def ens_config() -> EnsConfig:
    return EnsConfig(
        rpc_url="http://localhost:8545",
        registry_address=REGISTRY,
        private_key="0x" + "11" * 32,
        public_resolver=RESOLVER,
    )


@pytest.fixture
def workflow(ens_config, chain):
    flow = SubnameRegistrationWorkflow(ens_config, chain=chain)
    yield flow
    flow.signer_queue.shutdown()

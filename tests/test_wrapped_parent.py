#!/usr/bin/env python3
"""
Tests for the NameWrapper registration strategy
"""
import pytest
from web3 import Web3

from easydeploy.common.errors import ChainWriteError, OwnerMismatch
from easydeploy.ens.config import EnsConfig
from easydeploy.ens.namehash import namehash, node_to_token_id
from easydeploy.ens.workflow import RegistrationRequest, SubnameRegistrationWorkflow

from conftest import OWNER, REGISTRY, RESOLVER, STRANGER, TOKEN, WRAPPER, FakeChain


@pytest.fixture
def wrapped_config() -> EnsConfig:
    return EnsConfig(
        rpc_url="http://localhost:8545",
        registry_address=REGISTRY,
        private_key="0x" + "11" * 32,
        public_resolver=RESOLVER,
        name_wrapper=WRAPPER,
    )


def _register(config, chain, label="latte"):
    flow = SubnameRegistrationWorkflow(config, chain=chain)
    try:
        return flow.register(RegistrationRequest(label, OWNER, TOKEN, "easydeployai.eth"))
    finally:
        flow.signer_queue.shutdown()


def test_wrapped_parent_uses_set_subnode_record(wrapped_config):
    chain = FakeChain()
    chain.wrap_parent()

    result = _register(wrapped_config, chain)

    assert result.wrapped is True
    assert chain.writes == ["setSubnodeRecord", "setAddr", "safeTransferFrom"]
    assert result.txs["setResolver"] is None
    assert result.txs["createSubnode"] and result.txs["setAddr"] and result.txs["transferOwnership"]

    sub_node = namehash("latte.easydeployai.eth")
    assert chain.addr_records[sub_node] == Web3.to_checksum_address(TOKEN)
    assert chain.wrapped_owners[node_to_token_id(sub_node)] == Web3.to_checksum_address(OWNER)


def test_unwrapped_parent_with_wrapper_configured_uses_registry(wrapped_config):
    chain = FakeChain()
    chain.give_parent()

    result = _register(wrapped_config, chain)

    assert result.wrapped is False
    assert chain.writes == ["setSubnodeOwner", "setResolver", "setAddr", "setOwner"]
    assert ("call", "isWrapped", (namehash("easydeployai.eth"),)) in chain.calls


def test_wrapped_parent_owner_checked_on_wrapper(wrapped_config):
    chain = FakeChain()
    chain.wrap_parent(owner=STRANGER)

    with pytest.raises(OwnerMismatch) as exc_info:
        _register(wrapped_config, chain)

    assert exc_info.value.actual == STRANGER
    assert chain.writes == []


def test_wrapped_transfer_failure_reports_progress(wrapped_config):
    chain = FakeChain(fail_on="safeTransferFrom")
    chain.wrap_parent()

    with pytest.raises(ChainWriteError) as exc_info:
        _register(wrapped_config, chain)

    assert exc_info.value.step == "transferOwnership"
    assert [s for s, _ in exc_info.value.completed] == ["createSubnode", "setAddr"]

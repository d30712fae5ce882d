#!/usr/bin/env python3
"""
Blockchain client used by the ENS accessors.

``ChainClient`` is the narrow surface the accessors need: a read-only call
and a send-and-wait transaction. ``Web3ChainClient`` implements it with
web3.py and a local eth_account signer.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from eth_account import Account
from web3 import Web3
from web3.exceptions import TimeExhausted

from ..common.errors import ChainReadError, ChainWriteError

logger = logging.getLogger(__name__)


class ChainClient(ABC):
    """Signs, submits and waits for transactions; reads contract state"""

    address: str

    @abstractmethod
    def call(self, contract_address: str, abi: List[Dict], fn_name: str, args: Sequence[Any]) -> Any:
        """Read-only contract call; raises ChainReadError"""

    @abstractmethod
    def transact(
        self,
        contract_address: str,
        abi: List[Dict],
        fn_name: str,
        args: Sequence[Any],
        description: str = "",
    ) -> str:
        """Submit a transaction and block until it is mined.

        Returns the 0x-prefixed transaction hash; raises ChainWriteError when
        the transaction cannot be built or sent, reverts, or does not confirm
        within the client's timeout.
        """


class Web3ChainClient(ChainClient):
    """web3.py client bound to one signing key"""

    def __init__(
        self,
        rpc_url: str,
        private_key: str,
        tx_timeout_sec: int = 180,
        gas_multiplier: float = 1.2,
        chain_id: Optional[int] = None,
        w3: Optional[Web3] = None,
    ):
        self.rpc_url = rpc_url
        self.tx_timeout_sec = tx_timeout_sec
        self.gas_multiplier = gas_multiplier
        self._chain_id = chain_id

        self.w3 = w3 or Web3(Web3.HTTPProvider(rpc_url))
        self.account = Account.from_key(private_key)
        self.address = self.account.address

        logger.info(f"Chain client prepared for {rpc_url} with account {self.address}")

    @property
    def chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = self.w3.eth.chain_id
        return self._chain_id

    def _function(self, contract_address: str, abi: List[Dict], fn_name: str, args: Sequence[Any]):
        contract = self.w3.eth.contract(address=Web3.to_checksum_address(contract_address), abi=abi)
        return contract.functions[fn_name](*args)

    def call(self, contract_address: str, abi: List[Dict], fn_name: str, args: Sequence[Any]) -> Any:
        try:
            return self._function(contract_address, abi, fn_name, args).call()
        except Exception as e:
            raise ChainReadError(f"{fn_name} call on {contract_address} failed: {e}") from e

    def transact(
        self,
        contract_address: str,
        abi: List[Dict],
        fn_name: str,
        args: Sequence[Any],
        description: str = "",
    ) -> str:
        label = description or fn_name
        try:
            contract_function = self._function(contract_address, abi, fn_name, args)
            gas_estimate = contract_function.estimate_gas({"from": self.address})
            transaction = contract_function.build_transaction({
                "from": self.address,
                "gas": int(gas_estimate * self.gas_multiplier),
                "nonce": self.w3.eth.get_transaction_count(self.address, "pending"),
                "chainId": self.chain_id,
            })
            signed = self.account.sign_transaction(transaction)
            raw_tx = getattr(signed, "raw_transaction", None) or getattr(signed, "rawTransaction", None)
            if raw_tx is None:
                raise RuntimeError("Signed transaction missing raw transaction data")
            tx_hash = Web3.to_hex(self.w3.eth.send_raw_transaction(raw_tx))
        except Exception as e:
            raise ChainWriteError(f"{label} could not be submitted: {e}") from e

        logger.info(f"{label} sent: {tx_hash}")

        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.tx_timeout_sec)
        except TimeExhausted as e:
            raise ChainWriteError(
                f"{label} not confirmed within {self.tx_timeout_sec}s", tx_hash=tx_hash
            ) from e
        except Exception as e:
            raise ChainWriteError(f"{label} confirmation failed: {e}", tx_hash=tx_hash) from e

        if receipt["status"] != 1:
            raise ChainWriteError(f"{label} reverted (tx {tx_hash})", tx_hash=tx_hash)

        logger.info(f"{label} confirmed in block {receipt['blockNumber']}")
        return tx_hash

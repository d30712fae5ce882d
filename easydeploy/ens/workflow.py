#!/usr/bin/env python3
"""
ENS subname registration workflow.

Creates ``<label>.<parent>`` under a parent name owned by the backend signer,
points it at a token address and hands it to the end user:

    Validate -> AuthorizeParent -> ResolveResolver -> CreateSubnode
      -> AttachResolver -> SetAddressRecord -> TransferOwnership -> Done

Each write waits for inclusion before the next one is sent, and the whole
sequence runs on the signer's SignerQueue worker. Nothing is rolled back: a
failed write raises ChainWriteError naming the failing step together with the
steps that already committed.

When a NameWrapper is configured and the parent is wrapped, CreateSubnode and
AttachResolver collapse into one ``setSubnodeRecord`` and ownership moves with
an ERC-1155 transfer.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from web3 import Web3

from ..common.errors import (
    ChainWriteError,
    EasyDeployError,
    InvalidAddress,
    NotConfiguredError,
    OwnerMismatch,
    ResolverNotFound,
    ValidationError,
)
from ..common.logging import EasyDeployLogger
from ..common.validation import normalize_address, normalize_name, require_fields, sanitize_label
from .chain import ChainClient, Web3ChainClient
from .config import RESOLVER_LOOKUP_NAME, ZERO_ADDRESS, EnsConfig
from .namehash import labelhash, namehash
from .registry import RegistryAccessor
from .resolver import ResolverAccessor
from .signer_queue import SignerQueue
from .wrapper import NameWrapperAccessor

logger = logging.getLogger(__name__)

STEP_CREATE_SUBNODE = "createSubnode"
STEP_SET_RESOLVER = "setResolver"
STEP_SET_ADDR = "setAddr"
STEP_TRANSFER_OWNERSHIP = "transferOwnership"
WRITE_STEPS = (STEP_CREATE_SUBNODE, STEP_SET_RESOLVER, STEP_SET_ADDR, STEP_TRANSFER_OWNERSHIP)


def _is_zero(address: Optional[str]) -> bool:
    return not address or int(address, 16) == 0


@dataclass
class RegistrationRequest:
    label: Optional[str]
    owner_address: Optional[str]
    token_address: Optional[str]
    parent_name: Optional[str] = None


@dataclass(frozen=True)
class ValidatedRequest:
    label: str
    owner_address: str
    token_address: str
    parent_name: str

    @property
    def subname(self) -> str:
        return f"{self.label}.{self.parent_name}"


@dataclass
class RegistrationResult:
    subname: str
    node: str
    steps: List[Tuple[str, Optional[str]]] = field(default_factory=list)
    wrapped: bool = False

    @property
    def txs(self) -> Dict[str, Optional[str]]:
        """Transaction id per write step; None for steps folded into another"""
        taken = dict(self.steps)
        return {step: taken.get(step) for step in WRITE_STEPS}

    def to_dict(self) -> Dict:
        return {
            "ok": True,
            "subname": self.subname,
            "node": self.node,
            "wrapped": self.wrapped,
            "txs": self.txs,
        }


class SubnameRegistrationWorkflow:
    """Registers ENS subnames with the signer configured in ``EnsConfig``"""

    def __init__(
        self,
        config: EnsConfig,
        chain: Optional[ChainClient] = None,
        signer_queue: Optional[SignerQueue] = None,
        metrics: Optional[EasyDeployLogger] = None,
    ):
        self.config = config
        self.chain = chain or Web3ChainClient(
            rpc_url=config.rpc_url,
            private_key=config.private_key,
            tx_timeout_sec=config.tx_timeout_sec,
            gas_multiplier=config.gas_multiplier,
            chain_id=config.chain_id,
        )
        self.registry = RegistryAccessor(self.chain, config.registry_address)
        self.wrapper = NameWrapperAccessor(self.chain, config.name_wrapper) if config.name_wrapper else None
        self.signer_queue = signer_queue or SignerQueue()
        self.metrics = metrics

    @property
    def signer_address(self) -> str:
        return self.chain.address

    def validate(self, request: RegistrationRequest) -> ValidatedRequest:
        require_fields(
            {"label": request.label, "ownerAddress": request.owner_address, "tokenAddress": request.token_address},
            ["label", "ownerAddress", "tokenAddress"],
        )
        label = sanitize_label(request.label)
        if not label:
            raise ValidationError(f"label {request.label!r} has no characters left after sanitizing to [a-z0-9-]")

        owner_address = normalize_address(request.owner_address, "ownerAddress")
        token_address = normalize_address(request.token_address, "tokenAddress")

        parent_name = normalize_name(request.parent_name or self.config.default_parent, "parentName")
        if self.config.allowed_parents and parent_name not in self.config.allowed_parents:
            raise ValidationError(f"parentName {parent_name} is not served by this backend")

        return ValidatedRequest(label, owner_address, token_address, parent_name)

    def register(self, request: RegistrationRequest) -> RegistrationResult:
        """Validate, then run the on-chain steps behind earlier jobs for this signer"""
        return self.run(self.validate(request))

    def run(self, request: ValidatedRequest) -> RegistrationResult:
        """Run the on-chain steps for an already validated request"""
        return self.signer_queue.run(self.signer_address, self.execute, request)

    def execute(self, request: ValidatedRequest) -> RegistrationResult:
        started = time.time()
        steps: List[Tuple[str, Optional[str]]] = []
        try:
            result = self._execute(request, steps)
        except EasyDeployError as e:
            self._log_metrics(request, steps, started, outcome=type(e).__name__)
            raise
        self._log_metrics(request, steps, started, outcome="ok")
        return result

    def _execute(self, request: ValidatedRequest, steps: List[Tuple[str, Optional[str]]]) -> RegistrationResult:
        parent_node = namehash(request.parent_name)
        wrapped = self.wrapper is not None and self.wrapper.is_wrapped(parent_node)

        self.authorize_parent(request.parent_name, parent_node, wrapped)
        resolver_address = self.resolve_resolver()

        sub_node = namehash(request.subname)
        resolver = ResolverAccessor(self.chain, resolver_address)
        signer = self.signer_address

        logger.info(
            f"Registering {request.subname} -> {request.token_address} "
            f"for {request.owner_address} (wrapped parent: {wrapped})"
        )

        if wrapped:
            self._commit(steps, STEP_CREATE_SUBNODE, self.wrapper.set_subnode_record,
                         parent_node, request.label, signer, resolver_address)
            self._commit(steps, STEP_SET_ADDR, resolver.set_address_record, sub_node, request.token_address)
            self._commit(steps, STEP_TRANSFER_OWNERSHIP, self.wrapper.transfer, sub_node, signer, request.owner_address)
        else:
            # Signer owns the new node until its records are written
            self._commit(steps, STEP_CREATE_SUBNODE, self.registry.set_subnode_owner,
                         parent_node, labelhash(request.label), signer)
            self._commit(steps, STEP_SET_RESOLVER, self.registry.set_resolver_of, sub_node, resolver_address)
            self._commit(steps, STEP_SET_ADDR, resolver.set_address_record, sub_node, request.token_address)
            self._commit(steps, STEP_TRANSFER_OWNERSHIP, self.registry.set_owner_of, sub_node, request.owner_address)

        logger.info(f"Registered {request.subname}: {dict(steps)}")
        return RegistrationResult(
            subname=request.subname,
            node=Web3.to_hex(sub_node),
            steps=list(steps),
            wrapped=wrapped,
        )

    def authorize_parent(self, parent_name: str, parent_node: bytes, wrapped: bool = False) -> None:
        """Raise OwnerMismatch unless the signer controls ``parent_name``"""
        if wrapped:
            current_owner = self.wrapper.owner_of(parent_node)
        else:
            current_owner = self.registry.owner_of(parent_node)

        if _is_zero(current_owner) or current_owner.lower() != self.signer_address.lower():
            raise OwnerMismatch(parent_name, expected=self.signer_address, actual=current_owner or ZERO_ADDRESS)

    def resolve_resolver(self) -> str:
        """Configured public resolver, else the one registered for resolver.eth"""
        if self.config.public_resolver:
            try:
                configured = normalize_address(self.config.public_resolver, "ENS_PUBLIC_RESOLVER")
            except InvalidAddress as e:
                raise NotConfiguredError(str(e)) from e
            if not _is_zero(configured):
                return configured

        found = self.registry.resolver_of(namehash(RESOLVER_LOOKUP_NAME))
        if _is_zero(found):
            raise ResolverNotFound(
                f"No public resolver available: ENS_PUBLIC_RESOLVER is not set and the registry "
                f"has no resolver for {RESOLVER_LOOKUP_NAME}"
            )
        return Web3.to_checksum_address(found)

    def _commit(
        self,
        steps: List[Tuple[str, Optional[str]]],
        step: str,
        action: Callable[..., str],
        *args,
    ) -> str:
        try:
            tx_hash = action(*args)
        except ChainWriteError as e:
            committed = ", ".join(f"{s}={tx}" for s, tx in steps) or "none"
            raise ChainWriteError(
                f"ENS step {step} failed: {e}. Already committed on-chain: {committed}",
                tx_hash=e.tx_hash,
                step=step,
                completed=steps,
            ) from e
        steps.append((step, tx_hash))
        logger.info(f"{step} committed: {tx_hash}")
        return tx_hash

    def _log_metrics(self, request: ValidatedRequest, steps, started: float, outcome: str) -> None:
        if self.metrics is None:
            return
        self.metrics.log_metrics({
            "ens_subname": request.subname,
            "ens_outcome": outcome,
            "ens_steps_committed": len(steps),
            "ens_duration_sec": round(time.time() - started, 3),
        })

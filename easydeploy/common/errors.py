#!/usr/bin/env python3
"""
Custom error classes for the EasyDeploy backend
"""
from typing import List, Optional, Tuple


class EasyDeployError(Exception):
    """Base exception for EasyDeploy"""
    pass


class ValidationError(EasyDeployError):
    """Input validation failed"""
    pass


class InvalidAddress(ValidationError):
    """Address is missing or cannot be checksum-normalized"""

    def __init__(self, field: str, value: object):
        self.field = field
        self.value = value
        super().__init__(f"{field} is not a valid address: {value!r}")


class NotConfiguredError(EasyDeployError):
    """A backend integration is missing its configuration"""
    pass


class OwnerMismatch(EasyDeployError):
    """Signing key does not own the parent name"""

    def __init__(self, parent_name: str, expected: str, actual: str):
        self.parent_name = parent_name
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"ENS owner mismatch: the backend signer {expected} is not the owner of "
            f"{parent_name}. Current owner: {actual}"
        )


class ResolverNotFound(EasyDeployError):
    """No writable resolver could be located"""
    pass


class ChainReadError(EasyDeployError):
    """A read-only contract call failed"""
    pass


class ChainWriteError(EasyDeployError):
    """A transaction failed to submit, confirm, or reverted.

    When raised by the registration workflow, ``step`` names the step that
    failed and ``completed`` lists the (step, tx_hash) pairs that already
    committed on-chain, in order.
    """

    def __init__(
        self,
        message: str,
        tx_hash: Optional[str] = None,
        step: Optional[str] = None,
        completed: Optional[List[Tuple[str, Optional[str]]]] = None,
    ):
        self.tx_hash = tx_hash
        self.step = step
        self.completed = list(completed or [])
        super().__init__(message)


class UpstreamServiceError(EasyDeployError):
    """An external HTTP provider (LLM, pinning, quotes, prices) failed"""

    def __init__(self, message: str, details: object = None):
        self.details = details
        super().__init__(message)

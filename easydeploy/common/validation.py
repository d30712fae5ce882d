#!/usr/bin/env python3
"""
Input validation utilities for ENS names and addresses
"""
import re
from typing import Iterable, Optional

from web3 import Web3

from .errors import InvalidAddress, ValidationError

MAX_LABEL_LENGTH = 50

_LABEL_STRIP = re.compile(r"[^a-z0-9\-]")
_NAME_LABEL = re.compile(r"^[a-z0-9\-]+$")
_HEX_ADDRESS = re.compile(r"^0x[0-9a-fA-F]{40}$")


def sanitize_label(label: str) -> str:
    """Lowercase, drop anything outside [a-z0-9-], truncate to 50 chars"""
    return _LABEL_STRIP.sub("", label.lower())[:MAX_LABEL_LENGTH]


def require_fields(values: dict, names: Iterable[str]) -> None:
    """Raise ValidationError naming every field that is missing or blank"""
    missing = [n for n in names if values.get(n) is None or str(values.get(n)).strip() == ""]
    if missing:
        raise ValidationError(f"{', '.join(missing)} required")


def normalize_address(value: Optional[str], field: str = "address") -> str:
    """Return the checksummed form of ``value`` or raise InvalidAddress"""
    if not isinstance(value, str) or not value.strip():
        raise InvalidAddress(field, value)
    candidate = value.strip()
    if not _HEX_ADDRESS.match(candidate):
        raise InvalidAddress(field, value)
    # All-lowercase or all-uppercase hex carries no checksum; mixed case must match it
    body = candidate[2:]
    if body != body.lower() and body != body.upper() and not Web3.is_checksum_address(candidate):
        raise InvalidAddress(field, value)
    try:
        return Web3.to_checksum_address(candidate)
    except ValueError:
        raise InvalidAddress(field, value)


def normalize_name(name: Optional[str], field: str = "name") -> str:
    """Lowercase a dotted ENS name and check every label"""
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(f"{field} required")
    normalized = name.strip().lower().rstrip(".")
    labels = normalized.split(".")
    if len(labels) < 2:
        raise ValidationError(f"{field} must contain at least two labels: {name!r}")
    for label in labels:
        if not _NAME_LABEL.match(label):
            raise ValidationError(f"{field} has an invalid label {label!r}: {name!r}")
    return normalized

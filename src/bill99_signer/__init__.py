"""Bill99 gateway request signing and response verification."""

from __future__ import annotations

from importlib import import_module
from typing import Any, TYPE_CHECKING

__all__ = [
    "Signer",
    "SignerConfig",
    "EncodePolicy",
    "KeyType",
    "SignatureRecord",
    "SignerError",
    "KeyFormatError",
    "SigningError",
    "UnsupportedPolicyError",
    "UnsupportedDigestError",
    "canonical_bytes",
    "load_config",
]

if TYPE_CHECKING:
    from .canonical import canonical_bytes
    from .config_loader import EncodePolicy, SignerConfig, load_config
    from .errors import (
        KeyFormatError,
        SignerError,
        SigningError,
        UnsupportedDigestError,
        UnsupportedPolicyError,
    )
    from .keys import KeyType
    from .schemas import SignatureRecord
    from .signer import Signer


def __getattr__(name: str) -> Any:
    """Lazily import modules so ``cryptography`` loads only when needed."""

    module_map = {
        "Signer": "signer",
        "SignerConfig": "config_loader",
        "EncodePolicy": "config_loader",
        "load_config": "config_loader",
        "KeyType": "keys",
        "SignatureRecord": "schemas",
        "SignerError": "errors",
        "KeyFormatError": "errors",
        "SigningError": "errors",
        "UnsupportedPolicyError": "errors",
        "UnsupportedDigestError": "errors",
        "canonical_bytes": "canonical",
    }

    if name not in module_map:
        raise AttributeError(name)

    module = import_module(f".{module_map[name]}", __name__)
    return getattr(module, name)

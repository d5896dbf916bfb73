"""Resolve key arguments into PEM text and parsed RSA key objects.

A key argument may be a filesystem path (optionally with a ``file://``
prefix), armored PEM text, or a single-line Base64 body without armor. Bare
bodies are wrapped with the header matching their :class:`KeyType`.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from pathlib import Path

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from bill99_signer.errors import KeyFormatError

__all__ = [
    "KeyType",
    "convert_key",
    "format_key",
    "load_private_key",
    "load_public_key",
    "private_key",
    "public_key",
]

logger = logging.getLogger(__name__)

FILE_SCHEME = "file://"
ARMOR_MARKER = "-----"
LINE_WIDTH = 64


class KeyType(Enum):
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"

    @property
    def armor_label(self) -> str:
        if self is KeyType.PUBLIC:
            return "PUBLIC KEY"
        return "RSA PRIVATE KEY"


def convert_key(body: str, key_type: KeyType) -> str:
    """Wrap a single-line Base64 key body in PEM armor.

    The body is split into 64 character lines; the last line may be shorter.
    """

    label = key_type.armor_label
    lines = [f"-----BEGIN {label}-----"]
    for start in range(0, len(body), LINE_WIDTH):
        lines.append(body[start : start + LINE_WIDTH].strip())
    lines.append(f"-----END {label}-----")
    return "\n".join(lines)


def _resolve_path(key: str) -> Path | None:
    """Return the file named by ``key`` when it exists."""

    candidate = key.removeprefix(FILE_SCHEME)
    # Inline PEM text is never a path.
    if "\n" in candidate or not candidate:
        return None
    # isfile() reports False for over-long names and embedded NULs.
    return Path(candidate) if os.path.isfile(candidate) else None


def format_key(key: str, key_type: KeyType) -> str:
    """Return PEM text for ``key``.

    Raises:
        KeyFormatError: When the key file exists but cannot be read.
    """

    path = _resolve_path(key)
    if path is not None:
        try:
            key = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise _key_error(key_type, f"Unable to read key file {path}: {exc}") from exc
        logger.debug("Loaded %s key from file %s", key_type.value.lower(), path)

    if ARMOR_MARKER in key:
        return key

    logger.debug("Wrapping bare %s key body in PEM armor", key_type.value.lower())
    return convert_key(key.strip(), key_type)


def _key_error(key_type: KeyType, reason: str) -> KeyFormatError:
    if key_type is KeyType.PUBLIC:
        return KeyFormatError.for_public_key(reason)
    return KeyFormatError.for_private_key(reason)


def load_private_key(key: str, password: bytes | None = None) -> RSAPrivateKey:
    """Parse an RSA private key from a path, PEM text or bare body.

    Raises:
        KeyFormatError: When the material is unreadable, malformed or not RSA.
    """

    pem = format_key(key, KeyType.PRIVATE)
    try:
        loaded = serialization.load_pem_private_key(pem.encode("utf-8"), password=password)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise KeyFormatError.for_private_key(str(exc) or type(exc).__name__) from exc
    if not isinstance(loaded, RSAPrivateKey):
        raise KeyFormatError.for_private_key(
            f"Expected an RSA private key, got {type(loaded).__name__}"
        )
    return loaded


def load_public_key(key: str) -> RSAPublicKey:
    """Parse an RSA public key from a path, PEM text or bare body.

    Raises:
        KeyFormatError: When the material is unreadable, malformed or not RSA.
    """

    pem = format_key(key, KeyType.PUBLIC)
    try:
        loaded = serialization.load_pem_public_key(pem.encode("utf-8"))
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise KeyFormatError.for_public_key("The public key is invalid") from exc
    if not isinstance(loaded, RSAPublicKey):
        raise KeyFormatError.for_public_key(
            f"Expected an RSA public key, got {type(loaded).__name__}"
        )
    return loaded


@contextmanager
def private_key(key: str, password: bytes | None = None) -> Iterator[RSAPrivateKey]:
    """Load a private key for use inside a ``with`` block.

    ``cryptography`` key objects hold no explicit handle to close; the key is
    freed by the garbage collector once the caller drops its reference, so
    callers should not keep the ``as`` binding beyond the block.
    """

    yield load_private_key(key, password)


@contextmanager
def public_key(key: str) -> Iterator[RSAPublicKey]:
    """Load a public key for use inside a ``with`` block.

    See :func:`private_key` for the lifetime of the yielded object.
    """

    yield load_public_key(key)

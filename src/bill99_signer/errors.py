"""Exception hierarchy for :mod:`bill99_signer`."""

from __future__ import annotations

__all__ = [
    "SignerError",
    "KeyFormatError",
    "SigningError",
    "UnsupportedPolicyError",
    "UnsupportedDigestError",
    "PRIVATE_KEY_HINT",
    "PUBLIC_KEY_HINT",
]

# Operator-facing suffixes expected by existing gateway integrations.
PRIVATE_KEY_HINT = "应用私钥格式有误"
PUBLIC_KEY_HINT = "公钥格式有误"


class SignerError(Exception):
    """Base class for all signing and verification failures."""


class KeyFormatError(SignerError, ValueError):
    """Key material could not be read, parsed or was rejected."""

    @classmethod
    def for_private_key(cls, reason: str) -> "KeyFormatError":
        return cls(f"{reason}\n{PRIVATE_KEY_HINT}")

    @classmethod
    def for_public_key(cls, reason: str) -> "KeyFormatError":
        return cls(f"{reason}\n{PUBLIC_KEY_HINT}")


class SigningError(SignerError):
    """The signing primitive failed for a reason other than key format."""


class UnsupportedPolicyError(SignerError, ValueError):
    """The encode policy is neither QUERY nor JSON."""


class UnsupportedDigestError(SignerError, ValueError):
    """The requested digest algorithm is not known."""

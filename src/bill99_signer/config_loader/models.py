"""Typed configuration records for :mod:`bill99_signer.config_loader`."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from bill99_signer.errors import UnsupportedPolicyError

DEFAULT_IGNORES: frozenset[str] = frozenset({"signMsg"})


class EncodePolicy(str, Enum):
    """Serialization applied to the parameters selected for signing."""

    QUERY = "QUERY"
    JSON = "JSON"

    @classmethod
    def coerce(cls, value: "EncodePolicy | str") -> "EncodePolicy":
        """Return the policy matching ``value`` (case-insensitive).

        Raises:
            UnsupportedPolicyError: When ``value`` names no known policy.
        """

        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        raise UnsupportedPolicyError(f"Unsupported encode policy: {value!r}")


@dataclass(slots=True, frozen=True)
class SignerConfig:
    """Immutable configuration record for one signer instance.

    Attributes:
        ignores: Keys never included in the signed content.
        sort: Whether parameters are ordered (and filtered) by the message
            schema before serialization.
        encode_policy: Serialization of the selected parameters.
        digest: Default digest algorithm name for RSA operations.
    """

    ignores: frozenset[str] = field(default_factory=lambda: DEFAULT_IGNORES)
    sort: bool = True
    encode_policy: EncodePolicy = EncodePolicy.QUERY
    digest: str = "SHA1"

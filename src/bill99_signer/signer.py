"""Request signing and response verification for the Bill99 gateway.

:class:`Signer` binds a parameter set to a :class:`SignerConfig` and produces
either an RSA signature (Base64 of the raw PKCS#1 v1.5 signature) or an MD5
keyed digest (uppercase hex) over the canonical content.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import logging
from collections.abc import Iterable, Mapping
from dataclasses import replace

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import padding

from bill99_signer.canonical import content_to_sign, params_to_sign
from bill99_signer.config_loader.models import EncodePolicy, SignerConfig
from bill99_signer.digests import DigestLike, resolve_digest
from bill99_signer.errors import SigningError
from bill99_signer.keys import KeyType, convert_key, format_key, private_key, public_key

__all__ = ["Signer"]

logger = logging.getLogger(__name__)

MD5_KEY_SEPARATOR = "&key="


def _to_bytes(content: str | bytes) -> bytes:
    if isinstance(content, bytes):
        return content
    return content.encode("utf-8")


class Signer:
    """Sign and verify gateway parameter sets.

    Args:
        params: Parameter mapping to sign. Values are rendered as strings.
        config: Signer configuration; defaults to :class:`SignerConfig`.

    Example:
        >>> signer = Signer({"merchantAcctId": "1001", "orderId": "A1"})
        >>> signer.get_content_to_sign()
        'merchantAcctId=1001&orderId=A1'
    """

    def __init__(
        self,
        params: Mapping[str, object] | None = None,
        config: SignerConfig | None = None,
    ) -> None:
        self._params: dict[str, object] = dict(params or {})
        self._config = config or SignerConfig()

    @property
    def params(self) -> dict[str, object]:
        return dict(self._params)

    @property
    def config(self) -> SignerConfig:
        return self._config

    def get_ignores(self) -> frozenset[str]:
        return self._config.ignores

    def set_ignores(self, ignores: Iterable[str]) -> Signer:
        self._config = replace(self._config, ignores=frozenset(ignores))
        return self

    def set_sort(self, sort: bool) -> Signer:
        self._config = replace(self._config, sort=bool(sort))
        return self

    def set_encode_policy(self, policy: EncodePolicy | str) -> Signer:
        """Set the encode policy.

        Raises:
            UnsupportedPolicyError: When ``policy`` is neither QUERY nor JSON.
        """

        self._config = replace(self._config, encode_policy=EncodePolicy.coerce(policy))
        return self

    def get_params_to_sign(self) -> dict[str, str]:
        return params_to_sign(self._params, self._config)

    def get_content_to_sign(self) -> str:
        return content_to_sign(self._params, self._config)

    def canonical_bytes(self) -> bytes:
        return self.get_content_to_sign().encode("utf-8")

    # RSA

    def sign_rsa(
        self,
        private_key_arg: str,
        alg: DigestLike | None = None,
        password: bytes | None = None,
    ) -> str:
        """Sign the canonical content with an RSA private key.

        Args:
            private_key_arg: Key path, PEM text or bare Base64 body.
            alg: Digest algorithm; defaults to the configured digest (SHA1).
            password: Passphrase for encrypted private keys.

        Returns:
            Base64 encoded signature.

        Raises:
            KeyFormatError: When the private key is malformed.
            SigningError: When the signing primitive fails otherwise.
        """

        return self.sign_content_rsa(
            self.canonical_bytes(), private_key_arg, alg, password
        )

    def sign_content_rsa(
        self,
        content: str | bytes,
        private_key_arg: str,
        alg: DigestLike | None = None,
        password: bytes | None = None,
    ) -> str:
        """Sign arbitrary ``content`` with an RSA private key."""

        digest = resolve_digest(alg if alg is not None else self._config.digest)
        with private_key(private_key_arg, password) as key:
            try:
                raw = key.sign(_to_bytes(content), padding.PKCS1v15(), digest)
            except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
                raise SigningError(f"RSA signing failed: {exc}") from exc
        logger.debug("Produced RSA-%s signature", digest.name.upper())
        return base64.b64encode(raw).decode("ascii")

    def verify_rsa(
        self,
        content: str | bytes,
        signature: str,
        public_key_arg: str,
        alg: DigestLike | None = None,
    ) -> bool:
        """Verify a Base64 RSA ``signature`` over ``content``.

        Returns ``False`` for undecodable or non-matching signatures.

        Raises:
            KeyFormatError: When the public key is malformed.
        """

        digest = resolve_digest(alg if alg is not None else self._config.digest)
        with public_key(public_key_arg) as key:
            try:
                raw = base64.b64decode(signature)
            except (binascii.Error, ValueError):
                logger.debug("RSA signature is not valid Base64")
                return False
            try:
                key.verify(raw, _to_bytes(content), padding.PKCS1v15(), digest)
            except (InvalidSignature, ValueError):
                logger.debug("RSA signature mismatch")
                return False
        return True

    # MD5

    def sign_md5(self, key: str) -> str:
        """Return the uppercase MD5 digest of ``content + "&key=" + key``."""

        content = self.get_content_to_sign() + MD5_KEY_SEPARATOR + key
        return hashlib.md5(content.encode("utf-8")).hexdigest().upper()

    def verify_md5(
        self,
        content: str,
        signature: str,
        key: str,
        normalize: bool = False,
    ) -> bool:
        """Check ``signature`` against ``MD5(content + key)``.

        The recomputed digest is lowercase hex. Without ``normalize`` the
        comparison is case-sensitive, so an uppercase signature produced by
        :meth:`sign_md5` only matches when ``normalize=True``. Existing
        integrations depend on the case-sensitive default.
        """

        expected = hashlib.md5((content + key).encode("utf-8")).hexdigest()
        received = signature
        if normalize:
            expected = expected.upper()
            received = received.strip().upper()
        matched = hmac.compare_digest(expected.encode("utf-8"), received.encode("utf-8"))
        if not matched:
            logger.debug("MD5 signature mismatch")
        return matched

    # Key helpers

    @staticmethod
    def convert_key(body: str, key_type: KeyType) -> str:
        return convert_key(body, key_type)

    @staticmethod
    def format_key(key: str, key_type: KeyType) -> str:
        return format_key(key, key_type)

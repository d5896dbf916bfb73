"""Digest algorithm resolution for RSA signing."""

from __future__ import annotations

from cryptography.hazmat.primitives import hashes

from bill99_signer.errors import UnsupportedDigestError

_DIGESTS: dict[str, type[hashes.HashAlgorithm]] = {
    "SHA1": hashes.SHA1,
    "SHA224": hashes.SHA224,
    "SHA256": hashes.SHA256,
    "SHA384": hashes.SHA384,
    "SHA512": hashes.SHA512,
    "MD5": hashes.MD5,
}

DigestLike = str | hashes.HashAlgorithm | type[hashes.HashAlgorithm]


def resolve_digest(alg: DigestLike) -> hashes.HashAlgorithm:
    """Return a hash algorithm instance for ``alg``.

    Accepts names such as ``"sha256"``, ``"SHA-256"`` or
    ``"OPENSSL_ALGO_SHA256"``, as well as ``cryptography`` hash instances or
    classes.

    Raises:
        UnsupportedDigestError: When the name is not recognised.
    """

    if isinstance(alg, hashes.HashAlgorithm):
        return alg
    if isinstance(alg, type) and issubclass(alg, hashes.HashAlgorithm):
        return alg()
    if isinstance(alg, str):
        name = alg.strip().upper().replace("-", "")
        name = name.removeprefix("OPENSSL_ALGO_")
        factory = _DIGESTS.get(name)
        if factory is not None:
            return factory()
    raise UnsupportedDigestError(f"Unsupported digest algorithm: {alg!r}")

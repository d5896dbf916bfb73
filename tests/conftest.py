"""Pytest configuration and fixtures."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

import pytest

# Ensure src/ is on sys.path for tests so the src layout is used during test runs
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from cryptography.hazmat.primitives import serialization  # noqa: E402
from cryptography.hazmat.primitives.asymmetric import rsa  # noqa: E402


@dataclass(frozen=True)
class RsaKeyPair:
    private_pem: str
    public_pem: str

    @staticmethod
    def _body(pem: str) -> str:
        return "".join(line for line in pem.splitlines() if not line.startswith("-----"))

    @property
    def private_body(self) -> str:
        """Single-line Base64 body of the PKCS#1 private key."""
        return self._body(self.private_pem)

    @property
    def public_body(self) -> str:
        return self._body(self.public_pem)


def _generate_pair() -> RsaKeyPair:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")
    public_pem = (
        key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode("ascii")
    )
    return RsaKeyPair(private_pem=private_pem, public_pem=public_pem)


@pytest.fixture(scope="session")
def key_pair() -> RsaKeyPair:
    return _generate_pair()


@pytest.fixture(scope="session")
def other_key_pair() -> RsaKeyPair:
    """An unrelated key pair for mismatch checks."""
    return _generate_pair()


@pytest.fixture
def key_files(tmp_path: Path, key_pair: RsaKeyPair) -> tuple[Path, Path]:
    private_path = tmp_path / "merchant.pem"
    public_path = tmp_path / "gateway_pub.pem"
    private_path.write_text(key_pair.private_pem, encoding="utf-8")
    public_path.write_text(key_pair.public_pem, encoding="utf-8")
    return private_path, public_path


@pytest.fixture
def request_params() -> dict[str, str]:
    return {
        "inputCharset": "1",
        "version": "v2.0",
        "signType": "4",
        "merchantAcctId": "1001",
        "orderId": "A1",
        "orderAmount": "100",
        "orderTime": "20240101000000",
        "productName": "x",
        "signMsg": "OLD",
    }


@pytest.fixture
def response_params() -> dict[str, str]:
    return {
        "merchantAcctId": "m",
        "orderId": "o",
        "orderTime": "t",
        "payAmount": "500",
        "payResult": "10",
    }


@pytest.fixture(autouse=True)
def _clear_signer_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host environment variables out of settings-driven tests."""
    for name in list(os.environ):
        if name.startswith("BILL99_"):
            monkeypatch.delenv(name, raising=False)

"""Pydantic models describing the signer's published documents."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class SignatureRecord(BaseModel):
    """Immutable description of one produced signature."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    sign_type: Literal["MD5", "RSA"] = Field(
        ...,
        description="Signature scheme: keyed MD5 digest or RSA.",
    )
    algorithm: str = Field(
        ...,
        description="Digest algorithm used (for example 'MD5' or 'SHA1').",
        min_length=1,
    )
    content: str = Field(
        ...,
        description="Canonical content that was signed, without the MD5 key suffix.",
    )
    signature: str = Field(
        ...,
        description="Uppercase hex digest (MD5) or Base64 signature (RSA).",
        min_length=1,
    )

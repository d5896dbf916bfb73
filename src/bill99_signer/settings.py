"""Environment-backed settings primitives for :mod:`bill99_signer`."""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["SignerSettings", "get_settings", "parse_bool"]

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def parse_bool(value: object) -> bool | None:
    """Parse a boolean flag word, returning ``None`` when unrecognised."""

    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
    return None


class SignerSettings(BaseSettings):
    """Expose environment-derived configuration knobs for the signer.

    All environment lookups go through this class. Malformed values are
    treated as unset rather than failing at import time.

    Attributes:
        ignores: Comma separated keys excluded from signing.
        sort: Override for schema ordering.
        encode_policy: ``QUERY`` or ``JSON``.
        rsa_digest: Default digest name for RSA signatures.
        config_path: Explicit path to a structured configuration file.
        private_key: Private key (path, PEM or bare body) used by the CLI.
        public_key: Public key (path, PEM or bare body) used by the CLI.
        md5_key: Shared MD5 secret used by the CLI.
        log_level: Logging level name for the CLI.
    """

    ignores: str | None = Field(default=None, alias="BILL99_SIGN_IGNORES")
    sort: bool | None = Field(default=None, alias="BILL99_SIGN_SORT")
    encode_policy: str | None = Field(default=None, alias="BILL99_ENCODE_POLICY")
    rsa_digest: str | None = Field(default=None, alias="BILL99_RSA_DIGEST")
    config_path: str | None = Field(default=None, alias="BILL99_SIGNER_CONFIG")
    private_key: str | None = Field(default=None, alias="BILL99_PRIVATE_KEY")
    public_key: str | None = Field(default=None, alias="BILL99_PUBLIC_KEY")
    md5_key: str | None = Field(default=None, alias="BILL99_MD5_KEY")
    log_level: str = Field(default="WARNING", alias="BILL99_LOG_LEVEL")

    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    @field_validator("sort", mode="before")
    @classmethod
    def _parse_optional_bool(cls, value: object) -> bool | None:
        """Parse the optional boolean while tolerating malformed input."""

        return parse_bool(value)

    @field_validator("ignores", "encode_policy", "rsa_digest", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @property
    def ignore_keys(self) -> frozenset[str] | None:
        """Return the parsed ignore list, or ``None`` when not configured."""

        if self.ignores is None:
            return None
        return frozenset(part.strip() for part in self.ignores.split(",") if part.strip())


def get_settings() -> SignerSettings:
    """Return a :class:`SignerSettings` instance parsed from the environment."""

    return SignerSettings()

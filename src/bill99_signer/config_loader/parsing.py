"""Parsing and transformation helpers for :mod:`bill99_signer.config_loader`."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace

from bill99_signer.config_loader.models import EncodePolicy, SignerConfig
from bill99_signer.errors import UnsupportedPolicyError
from bill99_signer.settings import SignerSettings, parse_bool

logger = logging.getLogger(__name__)


def apply_environment_overrides(
    config: SignerConfig, settings: SignerSettings
) -> SignerConfig:
    """Apply environment-derived overrides to the configuration.

    Args:
        config: Base configuration instance.
        settings: Environment-derived settings.

    Returns:
        Configuration with environment overrides applied.
    """

    updated = config

    ignores = settings.ignore_keys
    if ignores is not None:
        updated = replace(updated, ignores=ignores)

    if settings.sort is not None:
        updated = replace(updated, sort=settings.sort)

    policy = _coerce_policy(settings.encode_policy)
    if policy is not None:
        updated = replace(updated, encode_policy=policy)

    if settings.rsa_digest:
        updated = replace(updated, digest=settings.rsa_digest.upper())

    return updated


def apply_structured_overrides(
    config: SignerConfig, data: Mapping[str, object]
) -> SignerConfig:
    """Apply overrides sourced from structured configuration data.

    The options may sit at the top level or below a ``signer`` section.

    Args:
        config: Base configuration instance.
        data: Mapping parsed from a configuration file.

    Returns:
        Configuration updated according to the provided mapping.
    """

    section = data.get("signer")
    if isinstance(section, Mapping):
        data = section

    updated = config

    ignores = _coerce_str_set(data.get("ignores"))
    if ignores is not None:
        updated = replace(updated, ignores=ignores)

    sort = parse_bool(data.get("sort"))
    if sort is not None:
        updated = replace(updated, sort=sort)

    policy = _coerce_policy(data.get("encode_policy"))
    if policy is not None:
        updated = replace(updated, encode_policy=policy)

    digest = data.get("digest")
    if isinstance(digest, str) and digest.strip():
        updated = replace(updated, digest=digest.strip().upper())

    return updated


def _coerce_policy(value: object) -> EncodePolicy | None:
    if value is None:
        return None
    try:
        return EncodePolicy.coerce(str(value))
    except UnsupportedPolicyError:
        logger.warning("Ignoring unsupported encode policy %r", value)
        return None


def _coerce_str_set(value: object) -> frozenset[str] | None:
    """Accept a list of keys or a comma separated string."""

    if isinstance(value, str):
        return frozenset(part.strip() for part in value.split(",") if part.strip())
    if isinstance(value, (list, tuple, set, frozenset)):
        return frozenset(str(item) for item in value if str(item))
    return None

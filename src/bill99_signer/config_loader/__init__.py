"""Public entry points for the :mod:`bill99_signer` configuration loader."""

from __future__ import annotations

from bill99_signer.config_loader.models import (
    DEFAULT_IGNORES,
    EncodePolicy,
    SignerConfig,
)
from bill99_signer.config_loader.parsing import (
    apply_environment_overrides,
    apply_structured_overrides,
)
from bill99_signer.config_loader.sources import load_structured_config
from bill99_signer.settings import SignerSettings, get_settings

__all__ = [
    "DEFAULT_IGNORES",
    "EncodePolicy",
    "SignerConfig",
    "load_config",
]


def load_config(
    path: str | None = None, *, settings: SignerSettings | None = None
) -> SignerConfig:
    """Load the signer configuration.

    Precedence, lowest first: built-in defaults, environment variables, then
    the structured configuration file.

    Args:
        path: Optional explicit path to a configuration file. When omitted the
            loader inspects ``BILL99_SIGNER_CONFIG`` and default locations.
        settings: Optional pre-instantiated environment settings.

    Returns:
        Fully populated :class:`SignerConfig` instance.
    """

    env_settings = settings or get_settings()
    base = apply_environment_overrides(SignerConfig(), env_settings)
    structured = load_structured_config(path, env_settings)
    if structured is None:
        return base
    return apply_structured_overrides(base, structured)

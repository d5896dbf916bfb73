"""Configuration file discovery for :mod:`bill99_signer.config_loader`."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path

from bill99_signer.settings import SignerSettings

logger = logging.getLogger(__name__)

_DEFAULT_CANDIDATES: tuple[Path, ...] = (
    Path("config/bill99.yml"),
    Path("config/bill99.yaml"),
    Path("config/bill99.json"),
)


def load_structured_config(
    path: str | None, settings: SignerSettings
) -> dict[str, object] | None:
    """Load configuration data from disk.

    Args:
        path: Explicit configuration path provided by the caller.
        settings: Environment-derived settings used for fallback discovery.

    Returns:
        The parsed mapping of the first readable candidate, otherwise ``None``.
    """

    candidates: Iterable[Path]
    if path is not None:
        candidates = (Path(path),)
    elif settings.config_path:
        candidates = (Path(settings.config_path),)
    else:
        candidates = _DEFAULT_CANDIDATES

    for candidate in candidates:
        data = _load_config_file(candidate)
        if data is not None:
            logger.debug("Loaded signer configuration from %s", candidate)
            return data
    return None


def _load_config_file(path: Path) -> dict[str, object] | None:
    if not path.is_file():
        return None
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Unable to read configuration file %s: %s", path, exc)
        return None

    if path.suffix.lower() in {".yml", ".yaml"}:
        try:
            import yaml
        except ModuleNotFoundError:
            logger.warning("PyYAML is not installed; skipping %s", path)
            return None
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            logger.warning("Invalid YAML in %s: %s", path, exc)
            return None
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            logger.warning("Invalid JSON in %s: %s", path, exc)
            return None

    if not isinstance(data, dict):
        return None
    return {str(key): value for key, value in data.items()}

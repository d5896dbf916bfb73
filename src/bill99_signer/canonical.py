"""Deterministic canonicalization of gateway parameter sets.

The canonical content is what gets signed: ignored keys are removed, the
remaining keys are optionally ordered by the message schema, empty values are
dropped and the result is serialized as a literal query string or compact
JSON object.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping

from bill99_signer.config_loader.models import EncodePolicy, SignerConfig

__all__ = [
    "REQUEST_SCHEMA",
    "RESPONSE_SCHEMA",
    "canonical_bytes",
    "content_to_sign",
    "params_to_sign",
    "render_value",
    "select_schema",
    "sort_params",
]

logger = logging.getLogger(__name__)

# Field order for merchant-to-gateway requests.
REQUEST_SCHEMA: tuple[str, ...] = (
    "inputCharset",
    "pageUrl",
    "bgUrl",
    "version",
    "language",
    "signType",
    "merchantAcctId",
    "payerName",
    "payerContactType",
    "payerContact",
    "payerIdType",
    "payerId",
    "payerIP",
    "orderId",
    "orderAmount",
    "orderTime",
    "orderTimestamp",
    "productName",
    "productNum",
    "productId",
    "productDesc",
    "ext1",
    "ext2",
    "payType",
    "bankId",
    "period",
    "cardIssuer",
    "cardNum",
    "remitType",
    "remitCode",
    "redoFlag",
    "pid",
    "submitType",
    "orderTimeOut",
    "extDataType",
    "extDataContent",
)

# Field order for gateway-to-merchant notifications. ``orderTime`` is listed
# twice by the gateway documentation; it is emitted once.
RESPONSE_SCHEMA: tuple[str, ...] = (
    "merchantAcctId",
    "version",
    "language",
    "signType",
    "payType",
    "period",
    "bankId",
    "orderId",
    "orderTime",
    "orderTime",
    "orderAmount",
    "bindCard",
    "bindMobile",
    "dealId",
    "bankDealId",
    "dealTime",
    "payAmount",
    "fee",
    "ext1",
    "ext2",
    "payResult",
    "errCode",
)

RESPONSE_MARKER = "payAmount"


def render_value(value: object) -> str:
    """Render a parameter value the way the gateway's SDK stringifies it.

    ``None`` and ``False`` render empty (and are therefore dropped), ``True``
    renders as ``"1"``.
    """

    if value is None or value is False:
        return ""
    if value is True:
        return "1"
    return str(value)


def select_schema(params: Mapping[str, object]) -> tuple[str, ...]:
    """Return the response schema when ``payAmount`` is present."""

    if RESPONSE_MARKER in params:
        return RESPONSE_SCHEMA
    return REQUEST_SCHEMA


def sort_params(params: Mapping[str, object]) -> dict[str, object]:
    """Order ``params`` by their message schema, dropping unknown keys."""

    schema = select_schema(params)
    logger.debug(
        "Ordering parameters by %s schema",
        "response" if schema is RESPONSE_SCHEMA else "request",
    )
    results: dict[str, object] = {}
    for key in schema:
        if key in params and key not in results:
            results[key] = params[key]
    return results


def params_to_sign(
    params: Mapping[str, object], config: SignerConfig
) -> dict[str, str]:
    """Select and order the parameters that take part in the signature.

    Args:
        params: Caller supplied parameter mapping.
        config: Signer configuration.

    Returns:
        Ordered mapping of key to rendered, non-empty value.
    """

    selected: dict[str, object] = {
        key: value for key, value in params.items() if key not in config.ignores
    }
    if config.sort:
        selected = sort_params(selected)

    rendered: dict[str, str] = {}
    for key, value in selected.items():
        text = render_value(value)
        if text:
            rendered[key] = text
    return rendered


def content_to_sign(params: Mapping[str, object], config: SignerConfig) -> str:
    """Serialize the selected parameters under the configured policy.

    Raises:
        UnsupportedPolicyError: When the policy is neither QUERY nor JSON.
    """

    policy = EncodePolicy.coerce(config.encode_policy)
    selected = params_to_sign(params, config)

    if policy is EncodePolicy.QUERY:
        # Values are written literally, the gateway signs unescaped content.
        return "&".join(f"{key}={value}" for key, value in selected.items())

    encoded = json.dumps(selected, separators=(",", ":"), ensure_ascii=True)
    # '/' only occurs inside JSON strings here.
    return encoded.replace("/", "\\/")


def canonical_bytes(params: Mapping[str, object], config: SignerConfig) -> bytes:
    """Return the UTF-8 encoded canonical content."""

    return content_to_sign(params, config).encode("utf-8")

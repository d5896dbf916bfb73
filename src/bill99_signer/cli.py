"""Command-line utilities for bill99_signer."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

from .config_loader import EncodePolicy, SignerConfig, load_config
from .logging_pipeline import configure_structured_logging
from .schemas import SignatureRecord
from .settings import SignerSettings, get_settings
from .signer import MD5_KEY_SEPARATOR, Signer

PACKAGE_LOGGER = "bill99_signer"


def _read_stdin() -> str | None:
    """Read JSON payload from stdin if available."""
    try:
        if sys.stdin and not sys.stdin.isatty():
            return sys.stdin.read()
    except IOError as e:
        print(f"Error reading stdin: {e}", file=sys.stderr)
    return None


def _load_params(path: str | None) -> dict[str, object]:
    """Load the parameter object from a file or stdin."""
    if path:
        return _parse_json_dict(Path(path).read_text(encoding="utf-8"))
    stdin_payload = _read_stdin()
    if stdin_payload:
        return _parse_json_dict(stdin_payload)
    raise ValueError("No input provided. Use --input or pipe JSON via stdin.")


def _parse_json_dict(payload: str) -> dict[str, object]:
    """Parse a JSON string and ensure the result is a dictionary."""

    data = json.loads(payload)
    if not isinstance(data, dict):
        raise ValueError("Input JSON must be an object at the top level.")
    return {str(key): value for key, value in data.items()}


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--input",
        "-i",
        help="Path to a JSON object of gateway parameters. If omitted, reads from stdin.",
    )
    common.add_argument("--config", help="Path to a signer configuration file.")
    common.add_argument(
        "--no-sort",
        action="store_true",
        help="Keep caller order and unknown keys instead of the message schema.",
    )
    common.add_argument(
        "--policy",
        choices=[policy.value for policy in EncodePolicy],
        help="Serialization of the signed content.",
    )
    common.add_argument(
        "--ignore",
        action="append",
        metavar="KEY",
        help="Exclude KEY from signing (repeatable). Replaces the configured list.",
    )
    common.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Quiet mode: suppress output, just return exit code.",
    )
    common.add_argument("--log-level", help="Logging level (default from BILL99_LOG_LEVEL).")
    common.add_argument(
        "--log-json", action="store_true", help="Emit log records as JSON lines."
    )

    parser = argparse.ArgumentParser(
        prog="bill99-sign",
        description="Sign and verify Bill99 gateway parameters.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser(
        "content", parents=[common], help="Print the canonical content to sign."
    )

    sign = commands.add_parser("sign", parents=[common], help="Sign the parameters.")
    sign.add_argument("--type", choices=["md5", "rsa"], default="md5")
    sign.add_argument(
        "--key",
        "-k",
        help="MD5 secret or RSA private key (path, PEM or bare Base64 body).",
    )
    sign.add_argument("--alg", help="RSA digest algorithm (default SHA1).")

    verify = commands.add_parser(
        "verify", parents=[common], help="Verify a signature over the parameters."
    )
    verify.add_argument("--type", choices=["md5", "rsa"], default="md5")
    verify.add_argument(
        "--key",
        "-k",
        help="MD5 secret or RSA public key (path, PEM or bare Base64 body).",
    )
    verify.add_argument(
        "--signature",
        "-s",
        help="Signature to check. Defaults to the 'signMsg' parameter.",
    )
    verify.add_argument(
        "--content",
        help="Verify this content instead of the canonical parameter content.",
    )
    verify.add_argument("--alg", help="RSA digest algorithm (default SHA1).")
    return parser


def _resolve_config(args: argparse.Namespace, settings: SignerSettings) -> SignerConfig:
    config = load_config(args.config, settings=settings)
    if args.no_sort:
        config = replace(config, sort=False)
    if args.policy:
        config = replace(config, encode_policy=EncodePolicy.coerce(args.policy))
    if args.ignore:
        config = replace(config, ignores=frozenset(args.ignore))
    return config


def _configure_logging(
    args: argparse.Namespace, settings: SignerSettings
) -> logging.Handler:
    level_name = (args.log_level or settings.log_level).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {level_name}")
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if args.log_json:
        return configure_structured_logging(package_logger, level=level)
    package_logger.setLevel(level)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    package_logger.addHandler(handler)
    return handler


def _require(value: str | None, message: str) -> str:
    if not value:
        raise ValueError(message)
    return value


def _sign(
    args: argparse.Namespace, signer: Signer, settings: SignerSettings
) -> SignatureRecord:
    content = signer.get_content_to_sign()
    if args.type == "md5":
        key = _require(args.key or settings.md5_key, "Missing --key and BILL99_MD5_KEY.")
        return SignatureRecord(
            sign_type="MD5", algorithm="MD5", content=content, signature=signer.sign_md5(key)
        )

    key = _require(
        args.key or settings.private_key, "Missing --key and BILL99_PRIVATE_KEY."
    )
    algorithm = (args.alg or signer.config.digest).upper()
    return SignatureRecord(
        sign_type="RSA",
        algorithm=algorithm,
        content=content,
        signature=signer.sign_rsa(key, algorithm),
    )


def _verify(
    args: argparse.Namespace,
    signer: Signer,
    params: dict[str, object],
    settings: SignerSettings,
) -> bool:
    signature = args.signature
    if not signature and isinstance(params.get("signMsg"), str):
        signature = params["signMsg"]
    signature = _require(signature, "Missing --signature and no 'signMsg' in input.")
    content = args.content if args.content is not None else signer.get_content_to_sign()

    if args.type == "md5":
        key = _require(args.key or settings.md5_key, "Missing --key and BILL99_MD5_KEY.")
        # Gateway MD5 signatures are uppercase hex over content + "&key=" + secret.
        return signer.verify_md5(
            content + MD5_KEY_SEPARATOR, signature, key, normalize=True
        )

    key = _require(args.key or settings.public_key, "Missing --key and BILL99_PUBLIC_KEY.")
    return signer.verify_rsa(content, signature, key, args.alg)


def main(argv: list[str] | None = None) -> int:
    """Sign or verify gateway parameters."""
    parser = _build_parser()

    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:  # pragma: no cover - controlled via tests
        exit_code = int(exc.code) if isinstance(exc.code, int) else 1
        return 0 if exit_code == 0 else 1

    handler: logging.Handler | None = None
    try:
        settings = get_settings()
        handler = _configure_logging(args, settings)
        config = _resolve_config(args, settings)
        params = _load_params(args.input)
        signer = Signer(params, config)

        if args.command == "content":
            if not args.quiet:
                print(signer.get_content_to_sign())
            return 0

        if args.command == "sign":
            record = _sign(args, signer, settings)
            if not args.quiet:
                print(record.model_dump_json())
            return 0

        is_valid = _verify(args, signer, params, settings)
        if not args.quiet:
            print(json.dumps({"valid": is_valid}, separators=(",", ":")))
        return 0 if is_valid else 1

    except Exception as exc:
        if not args.quiet:
            print(str(exc), file=sys.stderr)
        return 1
    finally:
        if handler is not None:
            logging.getLogger(PACKAGE_LOGGER).removeHandler(handler)


if __name__ == "__main__":
    raise SystemExit(main())

"""Tests for CLI functionality."""

import io
import json

import pytest

from bill99_signer.cli import main


@pytest.fixture
def params_file(tmp_path, request_params):
    path = tmp_path / "params.json"
    path.write_text(json.dumps(request_params), encoding="utf-8")
    return path


def test_cli_main_no_args(capsys):
    """A subcommand is required."""
    assert main([]) == 1


def test_cli_main_help(capsys):
    """argparse exits with 0 for --help."""
    assert main(["--help"]) == 0

    captured = capsys.readouterr()
    assert "usage:" in captured.out.lower()
    assert "verify" in captured.out.lower()


def test_cli_requires_input(capsys):
    assert main(["content"]) == 1
    assert "No input provided" in capsys.readouterr().err


def test_cli_content(params_file, capsys):
    assert main(["content", "-i", str(params_file)]) == 0
    assert capsys.readouterr().out.strip() == (
        "inputCharset=1&version=v2.0&signType=4&merchantAcctId=1001&orderId=A1"
        "&orderAmount=100&orderTime=20240101000000&productName=x"
    )


def test_cli_content_flags(params_file, capsys):
    argv = [
        "content",
        "-i",
        str(params_file),
        "--no-sort",
        "--policy",
        "JSON",
        "--ignore",
        "orderId",
    ]
    assert main(argv) == 0
    content = json.loads(capsys.readouterr().out)
    assert "orderId" not in content
    assert content["signMsg"] == "OLD"


def test_cli_content_from_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO('{"foo": "bar", "merchantAcctId": "m"}'))
    assert main(["content"]) == 0
    assert capsys.readouterr().out.strip() == "merchantAcctId=m"


def test_cli_rejects_non_object_input(tmp_path, capsys):
    path = tmp_path / "list.json"
    path.write_text("[1, 2]", encoding="utf-8")
    assert main(["content", "-i", str(path)]) == 1
    assert "must be an object" in capsys.readouterr().err


def test_cli_md5_sign_and_verify(tmp_path, params_file, request_params, capsys):
    assert main(["sign", "--type", "md5", "-k", "abc", "-i", str(params_file)]) == 0
    record = json.loads(capsys.readouterr().out)
    assert record["sign_type"] == "MD5"
    assert record["algorithm"] == "MD5"
    assert len(record["signature"]) == 32

    notification = tmp_path / "notification.json"
    notification.write_text(
        json.dumps(dict(request_params, signMsg=record["signature"])), encoding="utf-8"
    )
    assert main(["verify", "--type", "md5", "-k", "abc", "-i", str(notification)]) == 0
    assert json.loads(capsys.readouterr().out) == {"valid": True}

    assert main(["verify", "--type", "md5", "-k", "wrong", "-i", str(notification)]) == 1
    assert json.loads(capsys.readouterr().out) == {"valid": False}


def test_cli_md5_key_from_environment(params_file, monkeypatch, capsys):
    monkeypatch.setenv("BILL99_MD5_KEY", "abc")
    assert main(["sign", "-i", str(params_file)]) == 0
    env_record = json.loads(capsys.readouterr().out)

    assert main(["sign", "-k", "abc", "-i", str(params_file)]) == 0
    assert json.loads(capsys.readouterr().out) == env_record


def test_cli_missing_key(params_file, capsys):
    assert main(["sign", "-i", str(params_file)]) == 1
    assert "Missing --key" in capsys.readouterr().err


def test_cli_rsa_sign_and_verify(params_file, key_files, capsys):
    private_path, public_path = key_files
    argv = ["sign", "--type", "rsa", "-k", str(private_path), "--alg", "sha256"]
    assert main(argv + ["-i", str(params_file)]) == 0
    record = json.loads(capsys.readouterr().out)
    assert record["sign_type"] == "RSA"
    assert record["algorithm"] == "SHA256"

    verify = [
        "verify",
        "--type",
        "rsa",
        "-k",
        str(public_path),
        "--alg",
        "SHA256",
        "-s",
        record["signature"],
        "-i",
        str(params_file),
    ]
    assert main(verify) == 0
    assert main(verify + ["--content", "tampered"]) == 1


def test_cli_bad_private_key_reports_error(params_file, capsys):
    assert main(["sign", "--type", "rsa", "-k", "garbage", "-i", str(params_file)]) == 1
    assert "应用私钥格式有误" in capsys.readouterr().err


def test_cli_quiet_mode(params_file, capsys):
    assert main(["content", "-q", "-i", str(params_file)]) == 0
    assert capsys.readouterr().out == ""


def test_cli_json_logging(params_file, capsys):
    argv = ["content", "--log-json", "--log-level", "DEBUG", "-i", str(params_file)]
    assert main(argv) == 0
    lines = [line for line in capsys.readouterr().err.splitlines() if line.strip()]
    records = [json.loads(line) for line in lines]
    assert any("request schema" in record["message"] for record in records)


def test_cli_unknown_log_level(params_file, capsys):
    assert main(["content", "--log-level", "LOUD", "-i", str(params_file)]) == 1
    assert "Unknown log level" in capsys.readouterr().err

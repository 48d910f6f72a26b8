from unittest.mock import patch

from portfolio.auth import verify_password
from portfolio.main import main, parse_args


def test_parse_args_defaults_to_serve():
    args = parse_args([])
    assert args.command == "serve"
    assert args.port is None

    args = parse_args(["--log-level", "DEBUG", "serve", "--port", "8080"])
    assert args.log_level == "DEBUG"
    assert args.port == 8080


def test_hash_password_command_prints_bcrypt_hash(capsys):
    assert main(["hash-password", "s3cret"]) == 0
    printed = capsys.readouterr().out.strip()
    assert verify_password("s3cret", printed)


def test_serve_failure_returns_error_code():
    with patch("portfolio.main.serve", side_effect=RuntimeError("port in use")):
        assert main(["serve"]) == 1


def test_interrupt_returns_130():
    with patch("portfolio.main.serve", side_effect=KeyboardInterrupt):
        assert main(["serve"]) == 130

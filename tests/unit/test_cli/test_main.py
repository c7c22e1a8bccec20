"""Tests for the ``remote`` command-line entry point."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from remoteshell.cli import build_parser, main
from remoteshell.config.settings import ClientConfig, ServerConfig


@pytest.fixture(autouse=True)
def quiet_logging():
    with patch("remoteshell.utils.logging.setup_logging") as setup:
        yield setup


class TestParser:
    def test_server_arguments(self) -> None:
        args = build_parser().parse_args(["server", "0.0.0.0", "5000"])
        assert args.command == "server"
        assert args.bind_address == "0.0.0.0"
        assert args.port == 5000

    def test_client_arguments(self) -> None:
        args = build_parser().parse_args(["-v", "client", "example.org", "23"])
        assert args.command == "client"
        assert args.server_address == "example.org"
        assert args.port == 23
        assert args.verbose

    @pytest.mark.parametrize("port", ["0", "65536", "-1", "telnet"])
    def test_invalid_port(self, port: str, capsys: pytest.CaptureFixture) -> None:
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["server", "0.0.0.0", port])
        assert exc_info.value.code == 2
        assert "port" in capsys.readouterr().err

    def test_missing_port(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["client", "localhost"])
        assert exc_info.value.code == 2


class TestMain:
    def test_no_command_prints_usage(self, capsys: pytest.CaptureFixture) -> None:
        assert main([]) == 1
        assert "usage: remote" in capsys.readouterr().err

    def test_dispatches_server(self, tmp_path: Path) -> None:
        with patch("remoteshell.server.listener.run_server", return_value=1) as run_server:
            assert main(["-c", str(tmp_path / "none.yaml"), "server", "127.0.0.1", "4000"]) == 1
        bind, port, config = run_server.call_args.args
        assert (bind, port) == ("127.0.0.1", 4000)
        assert isinstance(config, ServerConfig)

    def test_dispatches_client(self, tmp_path: Path) -> None:
        with patch("remoteshell.client.session.run_client", return_value=0) as run_client:
            assert main(["-c", str(tmp_path / "none.yaml"), "client", "localhost", "4000"]) == 0
        host, port, config = run_client.call_args.args
        assert (host, port) == ("localhost", 4000)
        assert isinstance(config, ClientConfig)

    def test_config_file_applied(self, tmp_path: Path) -> None:
        config_file = tmp_path / "remoteshell.yaml"
        config_file.write_text("server:\n  shell: /bin/bash\n  command_max: 128\n")
        with patch("remoteshell.server.listener.run_server", return_value=1) as run_server:
            main(["-c", str(config_file), "server", "127.0.0.1", "4000"])
        config = run_server.call_args.args[2]
        assert config.shell == "/bin/bash"
        assert config.command_max == 128

    def test_verbose_sets_debug(self, tmp_path: Path, quiet_logging) -> None:
        with patch("remoteshell.client.session.run_client", return_value=0):
            main(["-v", "-c", str(tmp_path / "none.yaml"), "client", "localhost", "4000"])
        logging_config = quiet_logging.call_args.args[0]
        assert logging_config.level == "DEBUG"

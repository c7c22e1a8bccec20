"""Tests for the scoped raw-mode terminal (termios mocked)."""

from __future__ import annotations

import io
import logging
import os
import termios
from unittest.mock import patch

import pytest

from remoteshell.client.terminal import (
    CC,
    ENTER_SCREEN,
    IFLAG,
    LEAVE_SCREEN,
    LFLAG,
    OFLAG,
    RawTerminal,
    TerminalError,
    make_raw,
)


def sample_attrs() -> list:
    cc = [b"\x00"] * 32
    return [
        termios.IXON | termios.ICRNL | termios.BRKINT,
        termios.OPOST,
        termios.CS8,
        termios.ICANON | termios.ECHO | termios.ISIG | termios.IEXTEN,
        termios.B38400,
        termios.B38400,
        cc,
    ]


class TestMakeRaw:
    def test_clears_line_discipline_flags(self) -> None:
        raw = make_raw(sample_attrs())
        assert raw[LFLAG] & (termios.ICANON | termios.ECHO | termios.ISIG) == 0
        assert raw[LFLAG] & termios.IEXTEN
        assert raw[IFLAG] & (termios.IXON | termios.ICRNL) == 0
        assert raw[IFLAG] & termios.BRKINT
        assert raw[OFLAG] & termios.OPOST == 0
        assert raw[CC][termios.VMIN] == 1
        assert raw[CC][termios.VTIME] == 0

    def test_does_not_modify_original(self) -> None:
        attrs = sample_attrs()
        make_raw(attrs)
        assert attrs[LFLAG] & termios.ICANON
        assert attrs[CC][termios.VMIN] == b"\x00"


class ScreenRecorder(io.BytesIO):
    """Output stream noting how many log records existed when the screen was left."""

    def __init__(self, caplog: pytest.LogCaptureFixture) -> None:
        super().__init__()
        self._caplog = caplog
        self.records_at_leave: int | None = None

    def write(self, data: bytes) -> int:
        if data == LEAVE_SCREEN:
            self.records_at_leave = len(self._caplog.records)
        return super().write(data)


@pytest.fixture
def mock_termios():
    with patch("termios.tcgetattr", return_value=sample_attrs()) as get_attr, \
            patch("termios.tcsetattr") as set_attr:
        yield get_attr, set_attr


class TestRawTerminal:
    def test_enter_and_restore(self, mock_termios) -> None:
        get_attr, set_attr = mock_termios
        out = io.BytesIO()
        with RawTerminal(0, out):
            assert set_attr.call_count == 1
            assert out.getvalue() == ENTER_SCREEN
        assert set_attr.call_count == 2
        restored = set_attr.call_args_list[1].args
        assert restored == (0, termios.TCSAFLUSH, get_attr.return_value)
        assert out.getvalue() == ENTER_SCREEN + LEAVE_SCREEN

    def test_nothing_logged_while_raw(self, mock_termios, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.DEBUG, logger="remoteshell")
        _, set_attr = mock_termios
        messages_at_call = []
        set_attr.side_effect = lambda *args: messages_at_call.append(
            [record.getMessage() for record in caplog.records]
        )
        with RawTerminal(0, io.BytesIO()):
            raw_messages = [record.getMessage() for record in caplog.records]
        entered, restoring = messages_at_call
        assert any("raw mode" in message for message in entered)
        assert raw_messages == entered
        assert restoring == entered
        assert "restored" in caplog.records[-1].getMessage()

    def test_restore_failure_logged_after_screen(self, mock_termios, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.WARNING, logger="remoteshell")
        _, set_attr = mock_termios
        out = ScreenRecorder(caplog)
        terminal = RawTerminal(0, out)
        terminal.enter()
        set_attr.side_effect = termios.error(5, "I/O error")
        terminal.restore()
        assert out.records_at_leave == 0
        assert "Could not restore" in caplog.text

    def test_restores_on_exception(self, mock_termios) -> None:
        _, set_attr = mock_termios
        out = io.BytesIO()
        with pytest.raises(RuntimeError):
            with RawTerminal(0, out):
                raise RuntimeError("boom")
        assert set_attr.call_count == 2
        assert out.getvalue().endswith(LEAVE_SCREEN)

    def test_restore_runs_once(self, mock_termios) -> None:
        _, set_attr = mock_termios
        out = io.BytesIO()
        terminal = RawTerminal(0, out)
        terminal.enter()
        terminal.restore()
        terminal.restore()
        assert set_attr.call_count == 2
        assert out.getvalue().count(LEAVE_SCREEN) == 1

    def test_tcgetattr_failure(self) -> None:
        out = io.BytesIO()
        with patch("termios.tcgetattr", side_effect=termios.error(25, "Inappropriate ioctl")):
            with pytest.raises(TerminalError, match="tcgetattr") as exc_info:
                with RawTerminal(0, out):
                    pass
        assert exc_info.value.role == "client"
        assert out.getvalue() == b""

    def test_tcsetattr_failure_leaves_screen_alone(self) -> None:
        out = io.BytesIO()
        with patch("termios.tcgetattr", return_value=sample_attrs()), \
                patch("termios.tcsetattr", side_effect=termios.error(5, "I/O error")):
            with pytest.raises(TerminalError, match="tcsetattr"):
                RawTerminal(0, out).__enter__()
        assert out.getvalue() == b""

    def test_real_pty(self) -> None:
        pty = pytest.importorskip("pty")
        master, slave = pty.openpty()
        try:
            before = termios.tcgetattr(slave)
            with RawTerminal(slave, io.BytesIO()):
                during = termios.tcgetattr(slave)
                assert during[LFLAG] & termios.ICANON == 0
            assert termios.tcgetattr(slave) == before
        finally:
            os.close(master)
            os.close(slave)

#!/usr/bin/env python3
import atexit
import codecs
import logging
import os
import select
import sys
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, Optional

try:
    import termios
    import tty
except ImportError:
    termios = None
    tty = None

logger = logging.getLogger(__name__)


class InputStatus(Enum):
    READY = "ready"
    TIMEOUT = "timeout"
    ERROR = "error"


class Terminal:
    """Raw-mode control and polled reads on the controlling terminal."""

    def __init__(self, fd: Optional[int] = None) -> None:
        self.fd = sys.stdin.fileno() if fd is None else fd
        self._saved = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._atexit_registered = False

    @property
    def interactive(self) -> bool:
        return termios is not None and os.isatty(self.fd)

    @property
    def raw(self) -> bool:
        return self._saved is not None

    def enable_raw_mode(self) -> None:
        if self._saved is not None or not self.interactive:
            return

        self._saved = termios.tcgetattr(self.fd)
        if not self._atexit_registered:
            atexit.register(self.disable_raw_mode)
            self._atexit_registered = True

        mode = termios.tcgetattr(self.fd)
        mode[tty.IFLAG] &= ~(termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON)
        mode[tty.CFLAG] |= termios.CS8
        mode[tty.LFLAG] &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
        mode[tty.CC][termios.VMIN] = 1
        mode[tty.CC][termios.VTIME] = 0
        termios.tcsetattr(self.fd, termios.TCSAFLUSH, mode)

    def disable_raw_mode(self) -> None:
        if self._saved is None:
            return
        try:
            termios.tcsetattr(self.fd, termios.TCSAFLUSH, self._saved)
        except termios.error as error:
            logger.warning("could not restore terminal mode: %s", error)
        self._saved = None

    @contextmanager
    def raw_mode(self) -> Iterator["Terminal"]:
        self.enable_raw_mode()
        try:
            yield self
        finally:
            self.disable_raw_mode()

    @contextmanager
    def cooked(self) -> Iterator["Terminal"]:
        was_raw = self.raw
        self.disable_raw_mode()
        try:
            yield self
        finally:
            if was_raw:
                self.enable_raw_mode()

    def wait_for_input(self, timeout: float) -> InputStatus:
        try:
            ready, _, _ = select.select([self.fd], [], [], timeout)
        except InterruptedError:
            return InputStatus.TIMEOUT
        except (OSError, ValueError) as error:
            logger.debug("input wait failed: %s", error)
            return InputStatus.ERROR
        return InputStatus.READY if ready else InputStatus.TIMEOUT

    def read_char(self) -> Optional[str]:
        """Read one decoded character, or None at end of input."""
        while True:
            try:
                data = os.read(self.fd, 1)
            except InterruptedError:
                continue
            if not data:
                return None
            text = self._decoder.decode(data)
            if text:
                return text

# Copyright Red Hat
#
# ycomp/progress.py - Directory comparison terminal control and throbber
#
# This file is part of the ycomp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Terminal control and busy indicators for long running comparisons.

A directory comparison does not know in advance how many entries it will
visit, so progress is reported with a throbber that ticks once for each
directory listed rather than with a bounded progress bar.
"""
from typing import ClassVar, Dict, List, Optional, TextIO
from datetime import datetime, timedelta
from abc import ABC, abstractmethod
import curses
import sys
import os
import re

from ycomp import register_progress, unregister_progress

#: Default frames-per-second for Throbber classes
DEFAULT_FPS = 10

#: Microseconds per second
_USECS_PER_SEC = 1000000


class TermControl:
    """
    A class for portable terminal control and output.

    Uses the curses package to look up the control sequences for the
    current terminal. Each capability is exposed as an instance attribute
    holding the control string, or the empty string if the terminal (or
    output stream) does not support it, so output code can embed them
    unconditionally:

        >>> term = TermControl()
        >>> print("Files " + term.RED + "missing" + term.NORMAL)

    ``render()`` expands ``${NAME}`` substitutions in a template string.

    Adapted from the ActiveState recipe by Edward Loper (PSF license).
    """

    # Cursor movement:
    BOL: str = ""  #: Move the cursor to the beginning of the line
    UP: str = ""  #: Move the cursor up one line
    RIGHT: str = ""  #: Move the cursor right one char

    # Deletion:
    CLEAR_EOL: str = ""  #: Clear to the end of the line.

    # Output modes:
    BOLD: str = ""  #: Turn on bold mode
    NORMAL: str = ""  #: Turn off all modes

    # Cursor display:
    HIDE_CURSOR: str = ""  #: Make the cursor invisible
    SHOW_CURSOR: str = ""  #: Make the cursor visible

    # Foreground colors:
    BLACK: str = ""  #: Black foreground color
    BLUE: str = ""  #: Blue foreground color
    GREEN: str = ""  #: Green foreground color
    CYAN: str = ""  #: Cyan foreground color
    RED: str = ""  #: Red foreground color
    MAGENTA: str = ""  #: Magenta foreground color
    YELLOW: str = ""  #: Yellow foreground color
    WHITE: str = ""  #: White foreground color

    # Terminal size:
    columns: Optional[int] = None  #: Terminal width
    lines: Optional[int] = None  #: Terminal height

    _STRING_CAPABILITIES: List[str] = (
        """
    BOL:cr UP:cuu1 RIGHT:cuf1 CLEAR_EOL:el BOLD:bold NORMAL:sgr0
    HIDE_CURSOR:civis SHOW_CURSOR:cnorm""".split()
    )
    _ANSI_COLORS: List[str] = "BLACK RED GREEN YELLOW BLUE MAGENTA CYAN WHITE".split()

    def _force_ansi(self):
        for index, color in enumerate(self._ANSI_COLORS):
            setattr(self, color, f"\033[0;{30 + index}m")

        # Work around `less -R` not liking "\033[0m" (ANSI reset)
        setattr(self, "NORMAL", self.WHITE)

    def _init_colors(self):
        """
        Initialize terminal color codes from the ``setaf`` capability.
        """
        set_fg_ansi = self._tigetstr("setaf")
        if not set_fg_ansi:
            return
        set_fg_ansi = set_fg_ansi.encode("utf8")
        for i, color in enumerate(self._ANSI_COLORS):
            setattr(self, color, curses.tparm(set_fg_ansi, i).decode("utf8") or "")

    def __init__(self, term_stream: Optional[TextIO] = None, color: str = "auto"):
        """
        Initialize terminal capabilities and size information.

        If the output stream is not a tty or terminal setup fails,
        the instance will have no terminal capabilities (all control
        attributes remain empty strings or None).

        :param term_stream: Output stream to probe for capabilities.
        :type term_stream: ``Optional[TextIO]``
        :param color: A string to control color rendering: "auto", "always", or
                      "never".
        :type color: ``str``
        """
        if term_stream is None:
            term_stream = sys.stdout

        self.term_stream = term_stream

        if color != "always":
            if not hasattr(term_stream, "isatty") or not term_stream.isatty():
                return

        try:
            curses.setupterm()
        # curses.error cannot be named in an except clause on all builds.
        except BaseException as err:  # pylint: disable=broad-exception-caught
            if isinstance(err, (KeyboardInterrupt, SystemExit)):  # pragma: no cover
                raise
            if color == "always":
                self._force_ansi()
            return

        self.columns = curses.tigetnum("cols")
        self.lines = curses.tigetnum("lines")

        for capability in self._STRING_CAPABILITIES:
            (attr, cap_name) = capability.split(":")
            setattr(self, attr, self._tigetstr(cap_name) or "")

        if color != "never":
            self._init_colors()

    def _tigetstr(self, cap_name):
        # Strip padding delays of the form "$<2>".
        cap = curses.tigetstr(cap_name)
        cap = cap.decode(encoding="utf8") if cap else ""
        return cap.split("$", maxsplit=1)[0]

    def render(self, template):
        """
        Replace each $-substitution with the corresponding control.

        :param template: Template string containing ${NAME} patterns.
        :type template: ``str``
        :returns: Rendered string with substitutions applied.
        :rtype: ``str``
        """
        return re.sub(r"\$\$|\${\w+}", self._render_sub, template)

    def _render_sub(self, match):
        s = match.group()
        if s == "$$":
            return "$"
        return getattr(self, s[2:-1], "")


def _flush_with_broken_pipe_guard(stream: TextIO) -> None:
    """
    Handle ``BrokenPipeError`` when attempting to flush output streams.

    :param stream: The stream to flush.
    :type stream: TextIO
    """
    if stream is None or not hasattr(stream, "flush"):
        return
    try:
        stream.flush()
    except BrokenPipeError as err:
        devnull = os.open(os.devnull, os.O_WRONLY)
        try:
            if hasattr(stream, "fileno"):
                os.dup2(devnull, stream.fileno())
        finally:
            os.close(devnull)
        raise SystemExit() from err


class ThrobberBase(ABC):
    """
    An abstract busy indicator. The throbber reports liveness for a task
    where the total number of items is unknown, such as walking a pair of
    directory trees.
    """

    def __init__(self, header: str, register: bool = True):
        """
        Initialize base throbber state.

        :param header: The header string to print.
        :type header: ``str``
        :param register: Register this ``ThrobberBase`` for log callbacks.
        :type register: ``bool``
        """
        self.header: str = header
        self.frames: str = r"."
        self.term: Optional[TermControl] = None
        self.stream: Optional[TextIO] = None
        self.started: bool = False
        self.first_update: bool = True
        self.nr_frames: int = len(self.frames)
        self.fps: int = DEFAULT_FPS
        self.count: int = 0
        self._frame_index: int = 0
        self._interval_us: int = round((1.0 / self.fps) * _USECS_PER_SEC)
        self._last: Optional[datetime] = None
        self.registered: bool = False
        self.register: bool = register

    def reset_position(self):
        """Mark throbber as displaced by external output."""
        self.first_update = True

    def start(self):
        """
        Begin a throbber run.
        """
        self.started = True
        self.count = 0
        self._last = datetime.now() - timedelta(microseconds=self._interval_us)

        if self.register:
            register_progress(self)

        self._do_start()

    def _do_start(self):
        """
        Hook invoked when throbber begins.
        """
        print(f"{self.header}: ..", end="", file=self.stream)

    def _check_started(self, step: str):
        """
        Validate that throbber is active.

        :param step: The throbber step (method name) that is active.
        :type step: ``str``
        :raises ``ValueError``: If throbber has not started.
        """
        if not self.started or self._last is None:
            theclass = self.__class__.__name__
            raise ValueError(f"{theclass}.{step}() called before start()")

    def throb(self):
        """
        Count one unit of work and output a frame if the frame interval
        has elapsed.
        """
        self._check_started("throb")
        self.count += 1
        now = datetime.now()
        if (now - self._last).total_seconds() * _USECS_PER_SEC >= self._interval_us:
            self._do_throb()
            _flush_with_broken_pipe_guard(self.stream)
            self._last = now
            self._frame_index = (self._frame_index + 1) % self.nr_frames
            self.first_update = False

    @abstractmethod
    def _do_throb(self):
        """
        Hook for subclasses to update the throbber display.
        """

    def end(self, message: Optional[str] = None):
        """
        End the throbber run and finalize the display.

        :param message: An optional completion message.
        :type message: ``Optional[str]``
        """
        self._check_started("end")
        self._do_end(message=message)
        _flush_with_broken_pipe_guard(self.stream)
        self.started = False
        self._last = None
        if self.registered:
            unregister_progress(self)

    def _do_end(self, message: Optional[str] = None):
        print(f"\n{message}" if message else "", file=self.stream)


class Throbber(ThrobberBase):
    """
    A ``ThrobberBase`` subclass to display a one line Unicode or ASCII
    throbber for capable terminals.
    """

    STYLES: ClassVar[Dict[str, str]] = {
        "ascii": r"-\|/",
        "wave": "⠁⠂⠄⡀⢀⠠⠐⠈",
        "braillewave": "⣾⣽⣻⢿⡿⣟⣯⣷",
        "arrowspinner": "←↖↑↗→↘↓↙",
    }

    def __init__(
        self,
        header: str,
        register: bool = True,
        style: Optional[str] = None,
        term_stream: Optional[TextIO] = None,
        tc: Optional[TermControl] = None,
    ):
        """
        Initialise a new one line throbber instance.

        :param header: The header string to print.
        :type header: ``str``
        :param register: Register this ``Throbber`` for log callbacks.
        :type register: ``bool``
        :param style: A Unicode throbber style string. Ignored if the stream
                      cannot encode it. Defaults to "wave" if unset.
        :type style: ``Optional[str]``
        :param term_stream: The terminal stream to write to.
        :type term_stream: ``TextIO``
        :param tc: An optional ``TermControl`` already initialised with a
                   ``term_stream`` value; overrides ``term_stream`` if set.
        :type tc: ``Optional[TermControl]``
        :raises ValueError: If ``style`` is not a known style.
        """
        super().__init__(header, register=register)

        if style is not None and style not in Throbber.STYLES:
            raise ValueError(f"Unknown Throbber style: {style}")

        style = style or "wave"

        if tc is not None:
            term_stream = tc.term_stream

        self.term: Optional[TermControl] = tc or TermControl(term_stream=term_stream)
        self.stream: Optional[TextIO] = term_stream or sys.stdout

        self.frames = self.STYLES["ascii"]
        encoding = getattr(self.stream, "encoding", None)
        if encoding:
            try:
                self.STYLES[style].encode(encoding)
                self.frames = self.STYLES[style]
            except UnicodeEncodeError:
                pass
        self.nr_frames = len(self.frames)

    def _do_start(self):
        print(f"{self.term.HIDE_CURSOR}", end="", file=self.stream)

    def _do_throb(self):
        """
        Redraw the throbber line with the current frame and visit count.
        """
        if not self.first_update:
            print(
                self.term.BOL + self.term.UP + self.term.CLEAR_EOL,
                end="",
                file=self.stream,
            )

        print(
            (
                f"{self.header}: "
                f"{self.term.GREEN}{self.frames[self._frame_index]}{self.term.NORMAL}"
                f" ({self.count} directories)\n"
            ),
            end="",
            file=self.stream,
        )

    def _do_end(self, message: Optional[str] = None):
        if not self.first_update:
            print(
                self.term.BOL + self.term.UP + self.term.CLEAR_EOL,
                end="",
                file=self.stream,
            )
        print(self.term.SHOW_CURSOR, end="", file=self.stream)
        if message:
            print(f"{self.header}: {message}", file=self.stream)


class SimpleThrobber(ThrobberBase):
    """
    A simple throbber that does not rely on terminal capabilities.
    """

    def __init__(
        self, header: str, register: bool = True, term_stream: Optional[TextIO] = None
    ):
        """
        Initialise a simple ascii throbber.

        :param header: The throbber header.
        :type header: ``str``
        :param register: Register this ``SimpleThrobber`` for log callbacks.
        :type register: ``bool``
        :param term_stream: The terminal stream to write to.
        :type term_stream: ``Optional[TextIO]``
        """
        super().__init__(header, register=register)
        self.stream = term_stream or sys.stdout

    def _do_throb(self):
        print(self.frames[self._frame_index], end="", file=self.stream)


class NullThrobber(ThrobberBase):
    """
    A throbber class that produces no output.
    """

    def _do_start(self):
        """No-op start for NullThrobber."""

    def _do_throb(self):
        """No-op throb hook for NullThrobber."""

    def _do_end(self, message: Optional[str] = None):
        """No-op end for NullThrobber."""


class ProgressFactory:
    """
    A factory for constructing busy indicators.
    """

    @staticmethod
    def get_throbber_styles() -> List[str]:
        """
        Return a list of known ``Throbber`` style strings.

        :returns: A list of throbber styles.
        :rtype: ``List[str]``
        """
        return list(Throbber.STYLES.keys())

    @staticmethod
    def get_throbber(
        header: str,
        quiet: bool = False,
        style: Optional[str] = None,
        term_stream: Optional[TextIO] = None,
        term_control: Optional[TermControl] = None,
        register: bool = True,
    ) -> ThrobberBase:
        """
        Return an appropriate ThrobberBase implementation.

        :param header: The throbber header.
        :type header: ``str``
        :param quiet: Suppress all output.
        :type quiet: ``bool``
        :param style: An optional Unicode throbber style string.
        :type style: ``Optional[str]``
        :param term_stream: An optional ``TextIO`` output object.
                            Defaults to ``sys.stdout`` if unspecified.
        :type term_stream: ``Optional[TextIO]``
        :param term_control: An optional ``TermControl`` object to use
                             for the throbber.
        :type term_control: ``Optional[TermControl]``
        :param register: Register the new object with the log system for
                         notification callbacks.
        :type register: ``bool``
        :returns: An appropriate throbber implementation.
        :rtype: ``ThrobberBase``
        """
        if term_control:
            term_stream = term_control.term_stream

        term_stream = term_stream or sys.stdout
        if quiet:
            return NullThrobber(header, register=register)
        if not hasattr(term_stream, "isatty") or not term_stream.isatty():
            return SimpleThrobber(header, register=register, term_stream=term_stream)
        return Throbber(
            header,
            register=register,
            style=style,
            term_stream=term_stream,
            tc=term_control,
        )


__all__ = [
    "DEFAULT_FPS",
    "NullThrobber",
    "ProgressFactory",
    "SimpleThrobber",
    "TermControl",
    "ThrobberBase",
    "Throbber",
]

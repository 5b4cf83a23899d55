# Copyright Red Hat
#
# tests/test_progress.py - Throbber and TermControl tests
#
# This file is part of the ycomp project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
from unittest.mock import MagicMock, patch
from datetime import datetime, timedelta
from io import StringIO
import curses

from ycomp.progress import (
    DEFAULT_FPS,
    NullThrobber,
    ProgressFactory,
    SimpleThrobber,
    TermControl,
    Throbber,
    _flush_with_broken_pipe_guard,
)


class TestTermControl(unittest.TestCase):
    def test_term_control_default_stdout(self):
        """Test TermControl when stream is None"""
        tc = TermControl()
        self.assertIsNotNone(tc)

    def test_term_control_no_tty(self):
        """Test TermControl when stream is not a TTY."""
        mock_stream = MagicMock()
        mock_stream.isatty.return_value = False

        tc = TermControl(term_stream=mock_stream)

        # attributes should be empty strings
        self.assertEqual(tc.BOL, "")
        self.assertEqual(tc.GREEN, "")
        self.assertIsNone(tc.columns)

    def test_term_control_curses_error(self):
        """Test TermControl handles curses setup errors gracefully."""
        mock_stream = MagicMock()
        mock_stream.isatty.return_value = True

        with patch("ycomp.progress.curses") as mock_curses:
            mock_curses.setupterm.side_effect = curses.error("Curses error")

            tc = TermControl(term_stream=mock_stream)
            self.assertEqual(tc.BOL, "")
            self.assertEqual(tc.RED, "")

    def test_term_control_color_always_forces_ansi(self):
        """Test color="always" falls back to ANSI sequences."""
        mock_stream = MagicMock()
        mock_stream.isatty.return_value = False

        with patch("ycomp.progress.curses") as mock_curses:
            mock_curses.setupterm.side_effect = curses.error("Curses error")
            tc = TermControl(term_stream=mock_stream, color="always")

        self.assertEqual(tc.BLACK, "\033[0;30m")
        self.assertEqual(tc.RED, "\033[0;31m")
        self.assertEqual(tc.NORMAL, tc.WHITE)

    def test_term_control_init_success(self):
        """Test successful TermControl initialization with mocked curses."""
        mock_stream = MagicMock()
        mock_stream.isatty.return_value = True

        with patch("ycomp.progress.curses") as mock_curses:
            mock_curses.tigetnum.side_effect = lambda x: 80 if x == "cols" else 24
            mock_curses.tigetstr.side_effect = lambda x: (
                b"seq$<2>" if x in ["cr", "setaf"] else None
            )
            mock_curses.tparm.return_value = b"\x1b[30m"

            tc = TermControl(term_stream=mock_stream)

            self.assertEqual(tc.columns, 80)
            self.assertEqual(tc.lines, 24)
            # Padding delays are stripped
            self.assertEqual(tc.BOL, "seq")
            self.assertEqual(tc.UP, "")
            self.assertEqual(tc.BLACK, "\x1b[30m")

    def test_term_control_color_never(self):
        """Test color="never" leaves colors unset on a capable terminal."""
        mock_stream = MagicMock()
        mock_stream.isatty.return_value = True

        with patch("ycomp.progress.curses") as mock_curses:
            mock_curses.tigetnum.return_value = 80
            mock_curses.tigetstr.return_value = b"seq"
            mock_curses.tparm.return_value = b"\x1b[31m"

            tc = TermControl(term_stream=mock_stream, color="never")

            self.assertEqual(tc.BOL, "seq")
            self.assertEqual(tc.RED, "")

    def test_term_control_render(self):
        """Test the render method replaces placeholders."""
        tc = TermControl(term_stream=MagicMock())
        tc.GREEN = "<G>"
        tc.NORMAL = "<N>"

        text = "This is ${GREEN}green${NORMAL}"
        rendered = tc.render(text)
        self.assertEqual(rendered, "This is <G>green<N>")

        # Test escaped $
        self.assertEqual(tc.render("Money$$"), "Money$")
        # Unknown capabilities render as empty strings
        self.assertEqual(tc.render("${NOSUCH}x"), "x")

    def test_term_control_init_keyboard_interrupt(self):
        """Test that KeyboardInterrupt in setupterm is re-raised."""
        mock_stream = MagicMock()
        mock_stream.isatty.return_value = True

        with patch("ycomp.progress.curses") as mock_curses:
            mock_curses.setupterm.side_effect = KeyboardInterrupt()
            with self.assertRaises(KeyboardInterrupt):
                TermControl(term_stream=mock_stream)


class TestFlushGuard(unittest.TestCase):
    def test_flush_guard_broken_pipe(self):
        """Test BrokenPipeError handling in flush guard."""
        mock_stream = MagicMock()
        mock_stream.flush.side_effect = BrokenPipeError()
        mock_stream.fileno.return_value = 10

        with patch("ycomp.progress.os") as mock_os:
            mock_os.open.return_value = 999
            mock_os.devnull = "/dev/null"
            mock_os.O_WRONLY = 1

            with self.assertRaises(SystemExit):
                _flush_with_broken_pipe_guard(mock_stream)

            mock_os.open.assert_called_with("/dev/null", 1)
            mock_os.dup2.assert_called_with(999, 10)
            mock_os.close.assert_called_with(999)

    def test_flush_guard_no_flush_attr(self):
        """Test flush guard with stream lacking flush method."""
        mock_stream = MagicMock()
        del mock_stream.flush
        # Should not raise
        _flush_with_broken_pipe_guard(mock_stream)

    def test_flush_guard_none(self):
        _flush_with_broken_pipe_guard(None)


def _mock_tc(stream):
    mock_tc = MagicMock(spec=TermControl)
    mock_tc.HIDE_CURSOR = "<HIDE>"
    mock_tc.SHOW_CURSOR = "<SHOW>"
    mock_tc.BOL = "<BOL>"
    mock_tc.UP = "<UP>"
    mock_tc.RIGHT = "<RIGHT>"
    mock_tc.CLEAR_EOL = "<CE>"
    mock_tc.GREEN = "<G>"
    mock_tc.NORMAL = "<N>"
    mock_tc.term_stream = stream
    mock_tc.render.side_effect = lambda x: x
    return mock_tc


class TestThrobber(unittest.TestCase):
    def setUp(self):
        self.stream = MagicMock()
        self.stream.encoding = "ascii"
        self.mock_tc = _mock_tc(self.stream)

    def test_init_defaults(self):
        """Test Throbber initialization and default frame selection."""
        self.stream.encoding = "utf-8"
        t = Throbber("H", tc=self.mock_tc)
        self.assertEqual(t.frames, Throbber.STYLES["wave"])
        self.assertEqual(t.fps, DEFAULT_FPS)
        self.assertIs(t.stream, self.stream)

        # Test ASCII fallback
        self.stream.encoding = "ascii"
        t_ascii = Throbber("H", tc=self.mock_tc)
        self.assertEqual(t_ascii.frames, Throbber.STYLES["ascii"])
        self.assertEqual(t_ascii.nr_frames, 4)

    def test_init_style(self):
        self.stream.encoding = "utf-8"
        t = Throbber("H", style="arrowspinner", tc=self.mock_tc)
        self.assertIn("↑", t.frames)

    def test_init_unknown_style(self):
        with self.assertRaises(ValueError):
            Throbber("H", style="quux", tc=self.mock_tc)

    @patch("ycomp.progress.datetime")
    def test_lifecycle_flow(self, mock_dt):
        """Test the start -> throb -> end lifecycle with output verification."""
        stream = StringIO()
        mock_tc = _mock_tc(stream)
        t = Throbber("Comparing", tc=mock_tc, register=False)

        start_time = datetime(2024, 1, 1, 12, 0, 0)
        # start(), first throb(), second throb(), third throb() (too soon)
        mock_dt.now.side_effect = [
            start_time,
            start_time + timedelta(microseconds=1),
            start_time + timedelta(microseconds=200000),
            start_time + timedelta(microseconds=200001),
        ]

        t.start()
        self.assertEqual(stream.getvalue(), "<HIDE>")
        self.assertTrue(t.started)

        # First throb draws without clearing
        t.throb()
        output = stream.getvalue()
        self.assertNotIn("<BOL><UP><CE>", output)
        self.assertIn(f"Comparing: <G>{t.frames[0]}<N> (1 directories)\n", output)

        # Second throb redraws the line
        stream.truncate(0)
        stream.seek(0)
        t.throb()
        output = stream.getvalue()
        self.assertIn("<BOL><UP><CE>", output)
        self.assertIn(f"<G>{t.frames[1]}<N> (2 directories)", output)

        # Third throb is inside the frame interval: counted, not drawn
        stream.truncate(0)
        stream.seek(0)
        t.throb()
        self.assertEqual(stream.getvalue(), "")
        self.assertEqual(t.count, 3)

        t.end("Done!")
        output = stream.getvalue()
        self.assertIn("<BOL><UP><CE>", output)
        self.assertIn("<SHOW>", output)
        self.assertIn("Comparing: Done!", output)
        self.assertFalse(t.started)

    def test_throbber_end_no_message(self):
        stream = StringIO()
        t = Throbber("H", tc=_mock_tc(stream), register=False)
        t.start()
        stream.truncate(0)
        stream.seek(0)
        t.end(None)
        output = stream.getvalue()
        self.assertIn("<SHOW>", output)
        self.assertNotIn("None", output)

    def test_validation(self):
        """Test state validation (throb before start)."""
        t = Throbber("H", tc=self.mock_tc)
        with self.assertRaisesRegex(ValueError, "called before start"):
            t.throb()

    def test_end_before_start_raises(self):
        t = Throbber("H", tc=self.mock_tc)
        with self.assertRaisesRegex(
            ValueError, r"Throbber.end\(\) called before start\(\)"
        ):
            t.end("BadQuit!")

    def test_registration(self):
        t = Throbber("H", tc=_mock_tc(StringIO()))
        t.start()
        self.assertTrue(t.registered)
        t.end()
        self.assertFalse(t.registered)

    def test_reset_position(self):
        t = Throbber("H", tc=_mock_tc(StringIO()), register=False)
        t.first_update = False
        t.reset_position()
        self.assertTrue(t.first_update)


class TestSimpleThrobber(unittest.TestCase):
    @patch("ycomp.progress.datetime")
    def test_simple_flow(self, mock_dt):
        stream = StringIO()
        st = SimpleThrobber("Loading", term_stream=stream, register=False)

        start_time = datetime(2024, 1, 1, 12, 0, 0)
        mock_dt.now.side_effect = [
            start_time,
            start_time + timedelta(microseconds=100001),
        ]

        st.start()
        self.assertEqual(stream.getvalue(), "Loading: ..")

        st.throb()
        self.assertEqual(stream.getvalue(), "Loading: ...")

        st.end("Done")
        self.assertTrue(stream.getvalue().endswith("\nDone\n"))


class TestNullThrobber(unittest.TestCase):
    def test_silent_operation(self):
        nt = NullThrobber("H", register=False)
        nt.start()
        nt.throb()
        nt.end("Msg")
        self.assertEqual(nt.count, 1)


class TestThrobberFactory(unittest.TestCase):
    def setUp(self):
        stream = MagicMock()
        stream.isatty.return_value = True
        stream.encoding = "utf8"
        self.mock_tc = _mock_tc(stream)

    def test_get_throbber_styles(self):
        xstyles = sorted(list(Throbber.STYLES.keys()))
        styles = sorted(ProgressFactory.get_throbber_styles())
        self.assertEqual(styles, xstyles)

    def test_get_throbber_quiet(self):
        t = ProgressFactory.get_throbber("H", quiet=True)
        self.assertIsInstance(t, NullThrobber)

    def test_get_throbber_simple(self):
        mock_stream = MagicMock()
        mock_stream.isatty.return_value = False

        t = ProgressFactory.get_throbber("H", term_stream=mock_stream)
        self.assertIsInstance(t, SimpleThrobber)

    def test_get_throbber_fancy(self):
        t = ProgressFactory.get_throbber("H", term_control=self.mock_tc)
        self.assertIsInstance(t, Throbber)
        self.assertEqual(t.term, self.mock_tc)

    def test_get_throbber_unknown_style(self):
        with self.assertRaises(ValueError):
            ProgressFactory.get_throbber("Foo", style="quux", term_control=self.mock_tc)

    def test_throbber_factory_missing_isatty_attr(self):
        """Test factory with stream completely missing isatty attribute."""
        class DumbStream:
            pass
        t = ProgressFactory.get_throbber("H", term_stream=DumbStream())
        self.assertIsInstance(t, SimpleThrobber)

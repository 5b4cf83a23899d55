# Copyright Red Hat
#
# tests/dircompare/test_expand.py - SubtreeExpander tests.
#
# This file is part of the ycomp project.
#
# SPDX-License-Identifier: Apache-2.0
from threading import Event
from unittest.mock import MagicMock, patch
import unittest
import tempfile
import os

from ycomp import CompareCancelledError, ListingError
from ycomp.dircompare.difftypes import DiffType
from ycomp.dircompare.expand import SubtreeExpander
from ycomp.dircompare.listing import list_entries
from ycomp.dircompare.options import CompareOptions
from ycomp.dircompare.result import ComparisonResult

from .._util import make_tree


class TestSubtreeExpander(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory(prefix="ycomp-expand")
        self.root = self._tmp.name
        self.result = ComparisonResult()

    def tearDown(self):
        self._tmp.cleanup()

    def _names(self, entries):
        return [os.path.relpath(e.full_path, self.root) for e in entries]

    def test_expand_file(self):
        make_tree(self.root, {"f": "12345"})
        SubtreeExpander().expand("f", self.root, DiffType.EXTRA, self.result)
        self.assertEqual(self._names(self.result.extra), ["f"])
        self.assertEqual(self.result.extra[0].size, 5)
        self.assertEqual(self.result.missing, [])

    def test_expand_directory_preorder(self):
        make_tree(
            self.root,
            {
                "sub/y": "y",
                "sub/x": "x",
                "sub/deeper/z": "z",
                "sub/a/": None,
            },
        )
        SubtreeExpander().expand("sub", self.root, DiffType.MISSING, self.result)
        self.assertEqual(
            self._names(self.result.missing),
            [
                "sub",
                "sub/a",
                "sub/deeper",
                "sub/deeper/z",
                "sub/x",
                "sub/y",
            ],
        )
        self.assertEqual(self.result.extra, [])

    def test_expand_deep_tree(self):
        path = self.root
        for _ in range(300):
            path = os.path.join(path, "d")
            os.mkdir(path)
        SubtreeExpander().expand("d", self.root, DiffType.EXTRA, self.result)
        self.assertEqual(len(self.result.extra), 300)
        self.assertEqual(self.result.extra[-1].full_path, path)

    def test_expand_invalid_diff_type(self):
        make_tree(self.root, {"f": "1"})
        with self.assertRaises(ValueError):
            SubtreeExpander().expand(
                "f", self.root, DiffType.SIZE_MISMATCH, self.result
            )

    def test_expand_stat_failure(self):
        SubtreeExpander().expand("gone", self.root, DiffType.EXTRA, self.result)
        self.assertEqual(self._names(self.result.extra), ["gone"])
        self.assertEqual(self.result.extra[0].size, 0)
        self.assertEqual(len(self.result.log_messages), 1)
        self.assertIn("Could not stat file", self.result.log_messages[0])

    def test_expand_listing_failure_is_soft(self):
        make_tree(self.root, {"sub/bad/x": "1", "sub/good/y": "2"})
        bad = os.path.join(self.root, "sub", "bad")

        def _list_entries(path, side="subject"):
            if path == bad:
                raise ListingError(path, PermissionError(13, "Permission denied"))
            return list_entries(path, side=side)

        with patch(
            "ycomp.dircompare.expand.list_entries", side_effect=_list_entries
        ):
            SubtreeExpander().expand("sub", self.root, DiffType.EXTRA, self.result)

        self.assertEqual(
            self._names(self.result.extra),
            ["sub", "sub/bad", "sub/good", "sub/good/y"],
        )
        self.assertEqual(len(self.result.log_messages), 1)
        self.assertIn(f"Could not list directory {bad}", self.result.log_messages[0])

    def test_symlink_not_descended(self):
        make_tree(self.root, {"real/x": "1", "sub/": None})
        os.symlink(os.path.join(self.root, "real"), os.path.join(self.root, "sub", "l"))
        SubtreeExpander().expand("sub", self.root, DiffType.EXTRA, self.result)
        self.assertEqual(self._names(self.result.extra), ["sub", "sub/l"])

    def test_symlink_followed(self):
        make_tree(self.root, {"real/x": "1", "sub/": None})
        os.symlink(os.path.join(self.root, "real"), os.path.join(self.root, "sub", "l"))
        expander = SubtreeExpander(CompareOptions(follow_symlinks=True))
        expander.expand("sub", self.root, DiffType.EXTRA, self.result)
        self.assertEqual(
            self._names(self.result.extra), ["sub", "sub/l", "sub/l/x"]
        )

    def test_symlink_loop_followed(self):
        make_tree(self.root, {"sub/x": "1"})
        os.symlink(os.path.join(self.root, "sub"), os.path.join(self.root, "sub", "loop"))
        expander = SubtreeExpander(CompareOptions(follow_symlinks=True))
        expander.expand("sub", self.root, DiffType.EXTRA, self.result)
        self.assertEqual(
            self._names(self.result.extra), ["sub", "sub/loop", "sub/x"]
        )

    def test_tick_per_directory(self):
        make_tree(self.root, {"sub/a/x": "1", "sub/b/": None, "sub/f": "2"})
        tick = MagicMock()
        SubtreeExpander(tick=tick).expand(
            "sub", self.root, DiffType.EXTRA, self.result
        )
        self.assertEqual(tick.call_count, 3)

    def test_cancel(self):
        make_tree(self.root, {"sub/x": "1"})
        cancel = Event()
        cancel.set()
        with self.assertRaises(CompareCancelledError):
            SubtreeExpander(cancel=cancel).expand(
                "sub", self.root, DiffType.EXTRA, self.result
            )

    def test_cancel_not_set(self):
        make_tree(self.root, {"sub/x": "1"})
        SubtreeExpander(cancel=Event()).expand(
            "sub", self.root, DiffType.EXTRA, self.result
        )
        self.assertEqual(len(self.result.extra), 2)

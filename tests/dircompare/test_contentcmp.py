# Copyright Red Hat
#
# tests/dircompare/test_contentcmp.py - Content comparison tests.
#
# This file is part of the ycomp project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
import tempfile
import hashlib
import os

from ycomp import YcompArgumentError
from ycomp.dircompare.contentcmp import (
    _CHUNK_SIZE,
    ByteContentComparator,
    HashContentComparator,
    get_content_comparator,
)
from ycomp.dircompare.options import CompareOptions

from .._util import write_file


class ContentComparatorTestBase:
    comparator = None

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory(prefix="ycomp-content")
        self.root = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def _pair(self, data_a, data_b):
        return (
            write_file(os.path.join(self.root, "a"), data_a),
            write_file(os.path.join(self.root, "b"), data_b),
        )

    def test_same_content(self):
        path_a, path_b = self._pair(b"hello world", b"hello world")
        self.assertTrue(self.comparator.same_content(path_a, path_b))

    def test_different_content(self):
        path_a, path_b = self._pair(b"hello world", b"hello w0rld")
        self.assertFalse(self.comparator.same_content(path_a, path_b))

    def test_empty_files(self):
        path_a, path_b = self._pair(b"", b"")
        self.assertTrue(self.comparator.same_content(path_a, path_b))

    def test_difference_after_first_chunk(self):
        data = b"x" * (_CHUNK_SIZE + 10)
        path_a, path_b = self._pair(data, data[:-1] + b"y")
        self.assertFalse(self.comparator.same_content(path_a, path_b))

    def test_missing_file_raises(self):
        path_a = write_file(os.path.join(self.root, "a"), b"data")
        with self.assertRaises(OSError):
            self.comparator.same_content(path_a, os.path.join(self.root, "nope"))


class TestByteContentComparator(ContentComparatorTestBase, unittest.TestCase):
    comparator = ByteContentComparator()

    def test_name(self):
        self.assertEqual(self.comparator.name, "bytes")


class TestHashContentComparator(ContentComparatorTestBase, unittest.TestCase):
    comparator = HashContentComparator("md5")

    def test_content_hash(self):
        path = write_file(os.path.join(self.root, "f"), b"abc")
        for algorithm in ("md5", "sha1", "sha256", "sha512"):
            comparator = HashContentComparator(algorithm)
            self.assertEqual(
                comparator.content_hash(path),
                hashlib.new(algorithm, b"abc").hexdigest(),
            )

    def test_unknown_algorithm(self):
        with self.assertRaises(YcompArgumentError):
            HashContentComparator("crc32")


class TestGetContentComparator(unittest.TestCase):
    def test_default_is_bytes(self):
        comparator = get_content_comparator(CompareOptions())
        self.assertIsInstance(comparator, ByteContentComparator)

    def test_hash(self):
        comparator = get_content_comparator(CompareOptions(hash_algorithm="sha1"))
        self.assertIsInstance(comparator, HashContentComparator)
        self.assertEqual(comparator.name, "sha1")

# Copyright Red Hat
#
# ycomp/dircompare/__init__.py - Directory comparison package
#
# This file is part of the ycomp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Directory comparison package.

Compares a subject directory tree against a reference tree and classifies
every entry as missing, extra, differing in size or differing in content.
The main entry points are ``compare()``, ``DirectoryComparator`` and
``CompareOptions``.
"""
from .comparator import DirectoryComparator, compare
from .contentcmp import (
    ByteContentComparator,
    ContentComparator,
    HashContentComparator,
)
from .difftypes import DiffType
from .entries import FileEntry
from .evaluate import PairEvaluator, PairOutcome
from .expand import SubtreeExpander
from .listing import list_entries
from .merge import MergeTag, merge_walk
from .options import CompareOptions
from .report import render_report
from .result import ComparisonResult

__all__ = [
    "ByteContentComparator",
    "CompareOptions",
    "ComparisonResult",
    "ContentComparator",
    "DiffType",
    "DirectoryComparator",
    "FileEntry",
    "HashContentComparator",
    "MergeTag",
    "PairEvaluator",
    "PairOutcome",
    "SubtreeExpander",
    "compare",
    "list_entries",
    "merge_walk",
    "render_report",
]

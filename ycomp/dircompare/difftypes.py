# Copyright Red Hat
#
# ycomp/dircompare/difftypes.py - Directory comparison difference types
#
# This file is part of the ycomp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Directory comparison difference types
"""
from enum import Enum


class DiffType(Enum):
    """
    Enum for the categories an entry can be classified into, relative to
    the reference directory.
    """

    MISSING = "missing"
    EXTRA = "extra"
    SIZE_MISMATCH = "size_mismatch"
    CONTENT_MISMATCH = "content_mismatch"

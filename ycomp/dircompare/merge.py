# Copyright Red Hat
#
# ycomp/dircompare/merge.py - Directory comparison merge-walk
#
# This file is part of the ycomp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Merge-walk of two sorted sequences of sibling names.
"""
from typing import Iterator, Sequence, Tuple
from enum import Enum


class MergeTag(Enum):
    """
    Enum for the outcome of merging one name.
    """

    MATCHED = "matched"
    ONLY_IN_A = "only_in_a"
    ONLY_IN_B = "only_in_b"


def merge_walk(
    names_a: Sequence[str], names_b: Sequence[str]
) -> Iterator[Tuple[MergeTag, str]]:
    """
    Co-traverse two sorted name sequences and classify every name.

    Both sequences must already be sorted with the same ordering used for
    comparison here (Python string ordering, as produced by ``sorted()``).
    Each name is yielded exactly once, tagged ``MATCHED`` if it is present
    in both sequences, or ``ONLY_IN_A`` / ``ONLY_IN_B`` if it is present in
    one of them. Once either sequence is exhausted the remainder of the
    other is yielded without further comparisons.

    :param names_a: The sorted names from side A (the subject).
    :type names_a: ``Sequence[str]``
    :param names_b: The sorted names from side B (the reference).
    :type names_b: ``Sequence[str]``
    :returns: An iterator over ``(MergeTag, name)`` tuples in merge order.
    :rtype: ``Iterator[Tuple[MergeTag, str]]``
    """
    i = j = 0
    len_a, len_b = len(names_a), len(names_b)

    while i < len_a and j < len_b:
        name_a, name_b = names_a[i], names_b[j]
        if name_a < name_b:
            yield MergeTag.ONLY_IN_A, name_a
            i += 1
        elif name_b < name_a:
            yield MergeTag.ONLY_IN_B, name_b
            j += 1
        else:
            yield MergeTag.MATCHED, name_a
            i += 1
            j += 1

    for name_a in names_a[i:]:
        yield MergeTag.ONLY_IN_A, name_a
    for name_b in names_b[j:]:
        yield MergeTag.ONLY_IN_B, name_b

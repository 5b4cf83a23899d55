# Copyright Red Hat
#
# ycomp/dircompare/entries.py - Directory comparison file entries
#
# This file is part of the ycomp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Lightweight records for classified file system objects.

A ``FileEntry`` never holds an open file or directory handle: comparisons
over large trees keep only names, paths and sizes, and fetch live file
system state at the point of use.
"""
from dataclasses import dataclass
from typing import Any, Dict
import os


@dataclass(frozen=True)
class FileEntry:
    """
    Representation of a single classified file system entry.
    """

    #: The leaf name of this entry
    name: str
    #: The path of the directory containing this entry
    parent_directory: str
    #: Size in bytes at classification time (0 if unavailable)
    size: int = 0

    def __str__(self):
        return self.full_path

    @property
    def full_path(self) -> str:
        """
        The full path to this entry: always ``os.path.join(parent_directory,
        name)``.

        :returns: The joined path.
        :rtype: ``str``
        """
        return os.path.join(self.parent_directory, self.name)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert this ``FileEntry`` into a dictionary suitable for encoding
        as JSON.

        :returns: A dictionary mapping this instance's keys to values.
        :rtype: ``Dict[str, Any]``
        """
        return {
            "name": self.name,
            "parent_directory": self.parent_directory,
            "full_path": self.full_path,
            "size": self.size,
        }

# Copyright Red Hat
#
# ycomp/__init__.py - Directory comparison package initialisation
#
# This file is part of the ycomp project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Ycomp top-level package.
"""
from ._ycomp import *  # noqa: F401, F403
from ._ycomp import __all__  # noqa: F401

__version__ = "0.1.0"

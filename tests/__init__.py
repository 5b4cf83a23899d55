# Copyright Red Hat
#
# tests/__init__.py - Directory comparison test package
#
# This file is part of the ycomp project.
#
# SPDX-License-Identifier: Apache-2.0
import logging

log = logging.getLogger()
log.setLevel(logging.DEBUG)
formatter = logging.Formatter('%(asctime)s %(levelname)s %(name)s %(message)s')
file_handler = logging.FileHandler("test.log")
file_handler.setFormatter(formatter)
console_handler = logging.StreamHandler()
console_handler.setFormatter(formatter)
log.addHandler(file_handler)
log.addHandler(console_handler)


class MockArgs(object):
    debug = None
    verbose = 0
    version = False
    config = None
    quiet = True
    color = "never"
    content_compare = None
    hash_algorithm = None
    follow_symlinks = None
    recursive = None
    workers = None
    max_content_size = None
    output_format = "summary"
    pretty = False
    paths = []

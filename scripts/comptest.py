#!/usr/bin/python3
# Copyright Red Hat
#
# comptest.py - simple test point driver for ycomp.dircompare
#
# This file is part of the ycomp project.
#
# SPDX-License-Identifier: Apache-2.0
from argparse import ArgumentParser
from tempfile import TemporaryDirectory
import logging
import os

from ycomp import YcompError
from ycomp.command import compare_dirs, print_comparison
from ycomp.dircompare import CompareOptions

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

# Fixture trees: directory name -> {relative path: content}. A value of
# None creates an empty directory.
FIXTURES = {
    "test1": {},
    "test2": {},
    "test1b": {"a.txt": "alpha\n"},
    "test2b": {"a.txt": "alpha\n", "b.txt": "bravo\n"},
    "test1c": {"a.txt": "alpha\n", "c.txt": "charlie\n"},
    "test2c": {"a.txt": "alpha\n", "c.txt": "charlie charlie\n"},
    "test1d": {
        "a.txt": "alpha\n",
        "sub": None,
        "sub/x.txt": "x-ray\n",
        "sub/y.txt": "yankee\n",
    },
    "test2d": {"a.txt": "alpha\n"},
}

TEST_POINTS = [
    ("Non-existed src and reference dirs", "none_test1", "none_test2"),
    ("Non-existed src dir", "none_test1", "test2"),
    ("Non-existed reference dir", "test1", "none_test2"),
    ("Empty src and reference dirs", "test1", "test2"),
    ("Empty src and non-empty reference dirs", "test1", "test2b"),
    ("Non-Empty src and empty reference dirs", "test1b", "test2"),
    ("test B-1 (expect missing file)", "test1b", "test2b"),
    ("test B-2 (expect extra file)", "test2b", "test1b"),
    ("test C: (expect size diff)", "test1c", "test2c"),
    ("test D-1: (expect extra files with subdir)", "test1d", "test2d"),
    ("test D-2: (expect missing files with subdir)", "test2d", "test1d"),
]


def make_fixtures(root):
    for name, contents in FIXTURES.items():
        top = os.path.join(root, name)
        os.makedirs(top)
        for rel_path, data in contents.items():
            path = os.path.join(top, rel_path)
            if data is None:
                os.makedirs(path, exist_ok=True)
                continue
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "w", encoding="utf8") as f:
                f.write(data)


def testpoint(message, dir1, dir2, options):
    print("-" * 20)
    print(message)
    try:
        result = compare_dirs(dir1, dir2, options=options)
        print_comparison(result)
    except YcompError as err:
        print(f"\t\t** Exception: {err}")


def main():
    parser = ArgumentParser(prog="comptest.py")
    parser.add_argument(
        "-l",
        "--log-level",
        default="warn",
        help=f"Set log level ({', '.join(LOG_LEVELS.keys())})",
        choices=LOG_LEVELS.keys(),
    )
    parser.add_argument(
        "-j",
        "--workers",
        type=int,
        default=1,
        help="Number of worker threads to use",
    )
    args = parser.parse_args()
    ycomp_log = logging.getLogger("ycomp")
    formatter = logging.Formatter('%(levelname)s - %(message)s')
    ycomp_log.setLevel(LOG_LEVELS[args.log_level])
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    ycomp_log.addHandler(console_handler)

    options = CompareOptions(workers=args.workers, quiet=True)
    with TemporaryDirectory(prefix="comptest") as root:
        make_fixtures(root)
        cwd = os.getcwd()
        os.chdir(root)
        try:
            for message, dir1, dir2 in TEST_POINTS:
                testpoint(message, f"./{dir1}", f"./{dir2}", options)
        except (KeyboardInterrupt, BrokenPipeError):
            return
        finally:
            os.chdir(cwd)

if __name__ == "__main__":
    main()

# -*- coding: utf-8 -*-

# Noah Upgrade Binary Unpacker
#
# Parse a Noah firmware upgrade container (upgrade.bin) and extract each
# embedded image (u-boot, kernel, initrd, root filesystem, settings, ...)
# into an output directory.

import argparse

from . import __version__
from .errors import PkgError
from .pkg import PkgFile, prepare_output_directory
from .utils import print_error, hex_dump, red, green


def build_parser():
    parser = argparse.ArgumentParser(
        prog="noah-pkg-parser",
        description="Noah Upgrade Binary Unpacker v%s" % __version__)
    parser.add_argument(
        '-l', "--list", default=False, action="store_true",
        help="Show item info, do not extract.")
    parser.add_argument(
        '-q', "--quiet", default=False, action="store_true",
        help="Do not show info.")
    parser.add_argument(
        '-v', "--verbose", default=False, action="store_true",
        help="Also hex dump the reserved header area.")
    parser.add_argument(
        "--test", default=False, action='store_true',
        help="Test header parsing, output name/success.")
    parser.add_argument(
        "file", help="The upgrade container (upgrade.bin) to work on")
    parser.add_argument(
        "output", nargs='?', default=".",
        help="Extract items to this folder.")
    return parser


def show_errors(errors):
    if not errors:
        return
    print_error("%d item(s) failed:" % len(errors))
    for error in errors:
        print_error("  [%d] %s: %s" % (
            error.index, error.device, red(str(error))))


def main(argv=None):
    args = build_parser().parse_args(argv)

    try:
        container = PkgFile.from_path(args.file)
        if args.test:
            print("%s: %s" % (args.file, green("valid")
                              if container.valid_header else red("invalid")))
            return 0 if container.valid_header else 1
        container.check_header()
        if not args.list:
            prepare_output_directory(args.output)
    except PkgError as e:
        print_error("Error: %s." % str(e))
        return 1

    if not args.quiet:
        print("Noah Upgrade Binary Unpacker v%s" % __version__)

    container.process()
    if not args.quiet:
        container.showinfo()
        if args.verbose:
            hex_dump(container.header.reserved)

    if not args.list:
        container.dump(args.output, quiet=args.quiet)

    show_errors(container.errors)
    return 0

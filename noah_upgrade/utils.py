# -*- coding: utf-8 -*-

import os
import sys


def blue(msg):
    '''Return the input string as console-escaped blue.'''
    return "\033[1;36m%s\033[1;m" % msg


def red(msg):
    '''Return the input string as console-escaped red.'''
    return "\033[31m%s\033[1;m" % msg


def green(msg):
    '''Return the input string as console-escaped green.'''
    return "\033[32m%s\033[1;m" % msg


def print_error(msg):
    '''Write the input string to stderr.'''
    print(msg, file=sys.stderr)


def ascii_char(c):
    '''Return the ASCII or (.) representation of the input byte.'''
    if c >= 32 and c <= 126:
        return chr(c)
    return '.'


def printable(data):
    '''Render a fixed-size byte field for the console, NULs shown as (.).'''
    return "".join([ascii_char(c) for c in bytearray(data)])


def hex_dump(data, size=16):
    '''Print a debug view of binary data similar to a hex editor

    Args:
        data (binary): Data to be printed.
        size (Optional[int]): Length of each line.
    '''
    def print_line(line):
        print("%s | %s" % (line.hex(), printable(line)))

    for i in range(0, len(data) // size):
        print_line(data[i * size:i * size + size])

    if not len(data) % size == 0:
        print_line(data[(len(data) % size) * -1:])


def display_path(name):
    '''Render a filesystem path for the console, undecodable bytes replaced.'''
    return os.fsencode(name).decode(sys.getfilesystemencoding(), "replace")


def dump_data(name, data, quiet=False):
    '''Write binary data to name.

    Unlike a best-effort dump, a failure is raised to the caller so that it
    can be attributed to the object being written.

    Args:
        name (string): Path to output file, created or truncated.
        data (binary): Content to be written.
        quiet (Optional[bool]): Do not report the written path.
    '''
    if os.path.dirname(name) != '':
        if not os.path.exists(os.path.dirname(name)):
            os.makedirs(os.path.dirname(name))
    with open(name, 'wb') as fh:
        fh.write(data)
    if not quiet:
        print("Wrote: %s" % (red(display_path(name))))

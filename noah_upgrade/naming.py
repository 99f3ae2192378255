'''Output file naming for upgrade container items.

An item is named from its 'device' field. Flash-address devices name the
bootloader and kernel, '/dev/null' names the initrd, and partition devices
are named after the partition with the filesystem type as the extension.
Anything else is named after its slot index.
'''

import os
import re

from .structs.pkg_structs import *

_STRTOL_HEX = re.compile(br"0[xX]([0-9a-fA-F]+)")
_STRTOL_OCT = re.compile(br"0([0-7]*)")
_STRTOL_DEC = re.compile(br"[0-9]+")


def device_view(device):
    '''Return the device bytes up to the first NUL, bounded to the field.'''
    device = bytes(device[:PKG_DEVICE_SIZE])
    end = device.find(b"\0")
    if end >= 0:
        return device[:end]
    return device


def device_label(device):
    '''The bounded device string, for console output and error messages.'''
    return device_view(device).decode("latin-1")


def parse_number(value):
    '''Parse the leading integer of value with C strtol base 0 rules.

    A '0x' prefix selects hex, a leading '0' octal, otherwise decimal.
    Parsing stops at the first character invalid for the base.

    Return:
        int: The parsed value, or None if value does not start with a digit.
    '''
    match = _STRTOL_HEX.match(value)
    if match is not None:
        return int(match.group(1), 16)
    match = _STRTOL_OCT.match(value)
    if match is not None:
        return int(match.group(1), 8) if match.group(1) else 0
    match = _STRTOL_DEC.match(value)
    if match is not None:
        return int(match.group(0), 10)
    return None


def fstype_name(fstype):
    '''Return the symbolic name of a filesystem type id.'''
    return PKG_FSTYPES.get(fstype, PKG_FSTYPE_UNKNOWN)


def fallback_name(index):
    return "idx-%d-file.bin" % index


def _address_name(view):
    address = parse_number(view)
    if address in PKG_BOOTLOADER_ADDRESSES:
        return "u-boot-nand.bin"
    if address in PKG_KERNEL_ADDRESSES:
        return "uImage"
    return None


def _partition_name(view, fstype):
    separator = view.rfind(b"/")
    if separator < 0:
        return None
    partition = os.fsdecode(view[separator + 1:])
    partition = PKG_DEVICE_NAMES.get(partition, partition)
    return "%s.%s" % (partition, fstype)


def resolve_name(index, device, fstype):
    '''Resolve the output filename of an item.

    Args:
        index (int): The item slot index.
        device (binary): The raw fixed-size device field.
        fstype (string): The filesystem type name (see fstype_name).

    Return:
        string: The output filename, never empty.
    '''
    view = device_view(device)
    if view[:1].isdigit():
        name = _address_name(view)
    elif view == b"/dev/null":
        name = "uImage-initrd"
    else:
        name = _partition_name(view, fstype)
    if not name:
        name = fallback_name(index)
    return name

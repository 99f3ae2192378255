# -*- coding: utf-8 -*-
'''Noah upgrade container ("upgrade.bin") parsing and extraction.

The container starts with a 2048-byte header describing up to 31 items. The
header is stored with the two bits of every bit-pair swapped; the payloads
following it are stored as-is at absolute offsets within the container.

    struct PKG_HEADER {
        INT64: Tag
        INT32: Version
        UINT8: Reserved[52]
        PKG_ITEM: Items[31]
    };

    struct PKG_ITEM {
        UINT32: Length (0 marks an unused slot)
        UINT32: Offset
        INT32: Version
        INT32: FsType
        UINT32: Checksum (CRC-32, recomputed on extraction)
        CHAR: Device[12]
        UINT8: Reserved[32]
    };
'''

import collections
import ctypes
import os
import tempfile

from . import crc
from . import naming
from .base import FirmwareObject, StructuredObject
from .errors import *
from .utils import *
from .structs.pkg_structs import *


ExtractedItem = collections.namedtuple(
    "ExtractedItem", ["index", "name", "data", "checksum"])


def _swap_table():
    table = bytearray(256)
    for b in range(256):
        table[b] = ((b & 0x55) << 1) | ((b & 0xAA) >> 1)
    return bytes(table)


_SWAP_BIT_PAIRS = _swap_table()


def swap_bit_pairs(data):
    '''Swap the two bits within each bit-pair of every byte.

    The transform is its own inverse, it both obfuscates and recovers the
    container header.
    '''
    return bytes(data).translate(_SWAP_BIT_PAIRS)


def read_container(path):
    '''Read the entire container file.

    Raise:
        InputNotFound: The path cannot be opened or read.
    '''
    try:
        with open(path, 'rb') as fh:
            return fh.read()
    except OSError as e:
        raise InputNotFound(path, e.strerror or str(e))


def prepare_output_directory(path):
    '''Create the output directory (owner-only) if it does not exist.

    An existing directory must accept a new file.

    Raise:
        OutputDirectoryError: The path cannot be created, is not a directory
            or cannot be written to.
    '''
    if os.path.isdir(path):
        try:
            with tempfile.TemporaryFile(dir=path):
                pass
        except OSError as e:
            raise OutputDirectoryError(path, e.strerror or str(e))
        return path
    if os.path.exists(path):
        raise OutputDirectoryError(path, "not a directory")
    try:
        os.makedirs(path, 0o700)
    except OSError as e:
        raise OutputDirectoryError(path, e.strerror or str(e))
    return path


class PkgHeader(StructuredObject):
    '''The de-obfuscated container header.'''

    def __init__(self, data):
        if len(data) < PKG_HEADER_SIZE:
            raise TruncatedHeader(len(data), PKG_HEADER_SIZE)
        self.parse_structure(
            swap_bit_pairs(data[:PKG_HEADER_SIZE]), PkgHeaderType)

    @property
    def tag(self):
        return self.structure.Tag

    @property
    def version(self):
        return self.structure.Version

    @property
    def reserved(self):
        offset = PkgHeaderType.Reserved.offset
        return self.structure_data[offset:offset + PkgHeaderType.Reserved.size]

    @property
    def items(self):
        '''All item slots in order, including unused ones.'''
        return [self.structure.Items[i] for i in range(PKG_NUM_ITEMS)]

    def device(self, index):
        '''The raw, fixed-size device field of an item slot.'''
        offset = (PkgHeaderType.Items.offset +
                  index * ctypes.sizeof(PkgItemType) +
                  PkgItemType.Device.offset)
        return self.structure_data[offset:offset + PKG_DEVICE_SIZE]

    def showinfo(self, ts='', index=None):
        populated = len([i for i in self.items if i.Length])
        print("%s%s tag 0x%x version %d items %d/%d" % (
            ts, blue("Noah PkgHeader:"), self.tag, self.version,
            populated, PKG_NUM_ITEMS))


class PkgItem(FirmwareObject):
    '''One populated item slot and its payload.'''

    def __init__(self, index, item, device):
        self.index = index
        self.structure = item
        self.length = item.Length
        self.offset = item.Offset
        self.version = item.Version
        self.fstype = item.FsType
        self.device = device
        self.checksum = item.Checksum
        self.stored_checksum = item.Checksum
        self.fstype_name = naming.fstype_name(self.fstype)
        self.name = naming.resolve_name(index, device, self.fstype_name)
        self.data = None

    @property
    def device_label(self):
        return naming.device_label(self.device)

    @property
    def attrs(self):
        return {
            "length": self.length,
            "offset": self.offset,
            "version": self.version,
            "fstype": self.fstype_name,
            "checksum": self.checksum,
            "device": self.device,
        }

    def process(self, container):
        '''Slice the payload out of the (untouched) container and checksum it.

        Raise:
            OutOfRangeItem: The payload extends past the end of the container.
        '''
        if self.offset + self.length > len(container):
            raise OutOfRangeItem(
                self.index, self.device_label, self.offset, self.length,
                len(container))
        self.data = memoryview(container)[self.offset:self.offset + self.length]
        self.checksum = crc.checksum(self.data)
        self.structure.Checksum = self.checksum
        return True

    def showinfo(self, ts='', index=None):
        print("%s%s %d %s length 0x%x offset 0x%x version %d fstype %s "
              "checksum 0x%08X dev %s" % (
                  ts, blue("Noah PkgItem:"), self.index,
                  green(display_path(self.name)),
                  self.length, self.offset, self.version, self.fstype_name,
                  self.checksum, printable(self.device)))

    def dump(self, parent='', index=None, quiet=False):
        '''Write the payload to parent/name.

        Raise:
            OutputWriteError: The output file cannot be created or written.
        '''
        path = os.path.join(parent, self.name)
        try:
            dump_data(path, self.data, quiet)
        except OSError as e:
            raise OutputWriteError(
                self.index, self.device_label, path, e.strerror or str(e))
        return ExtractedItem(self.index, self.name, self.data, self.checksum)


class PkgFile(FirmwareObject):
    '''A Noah upgrade container.

    Construction never raises; check 'valid_header' (or call check_header)
    before processing. Per-item failures are collected in 'errors' and do
    not stop the remaining items from being processed or dumped.
    '''

    def __init__(self, data):
        self.data = data
        self.size = len(data)
        self.header = None
        self.items = []
        self.errors = []
        self.results = []
        self.valid_header = False
        try:
            self.header = PkgHeader(data)
            self.valid_header = True
        except TruncatedHeader as e:
            self.header_error = e

    @classmethod
    def from_path(cls, path):
        return cls(read_container(path))

    def check_header(self):
        '''Raise the header error, if any.

        Raise:
            TruncatedHeader: Fewer than PKG_HEADER_SIZE bytes were provided.
        '''
        if not self.valid_header:
            raise self.header_error
        return True

    @property
    def objects(self):
        return self.items

    def process(self):
        '''Checksum every populated item slot, in slot order.'''
        self.check_header()
        self.items = []
        self.errors = []
        for index, item in enumerate(self.header.items):
            if item.Length == 0:
                continue
            pkg_item = PkgItem(index, item, self.header.device(index))
            try:
                pkg_item.process(self.data)
            except OutOfRangeItem as e:
                self.errors.append(e)
                continue
            self.items.append(pkg_item)
        return len(self.errors) == 0

    def showinfo(self, ts='', index=None):
        self.header.showinfo(ts)
        for item in self.items:
            item.showinfo("%s  " % ts)

    def dump(self, parent='', index=None, quiet=False):
        '''Write each processed item to parent, collecting write failures.'''
        self.results = []
        for item in self.items:
            try:
                self.results.append(item.dump(parent, quiet=quiet))
            except OutputWriteError as e:
                self.errors.append(e)
        self.errors.sort(key=lambda e: e.index)
        return self.results


class ExtractionResult(object):
    '''The extracted items and the per-item errors of a run.'''

    def __init__(self, container):
        self.container = container
        self.items = list(container.results)
        self.errors = list(container.errors)

    @property
    def records(self):
        '''Diagnostic records, one per processed item.'''
        return [item.info() for item in self.container.items]

    @property
    def ok(self):
        return len(self.errors) == 0


def extract_all(data, output_directory, show=False):
    '''Parse a container and write every populated item to output_directory.

    Args:
        data (binary): The entire container contents.
        output_directory (string): Destination, created if it does not exist.
        show (Optional[bool]): Print item information while extracting.

    Raise:
        TruncatedHeader: The container is shorter than its header.
        OutputDirectoryError: The destination cannot be used.

    Return:
        ExtractionResult: extracted items and per-item errors.
    '''
    container = PkgFile(data)
    container.check_header()
    prepare_output_directory(output_directory)
    container.process()
    if show:
        container.showinfo()
    container.dump(output_directory, quiet=not show)
    return ExtractionResult(container)

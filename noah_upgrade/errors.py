'''Errors raised while reading and extracting an upgrade container.

Fatal errors abort a run before (or instead of) extraction. ItemErrors are
collected per slot by the container and the run continues.
'''


class PkgError(Exception):
    '''Base error for upgrade container handling.'''


class InputNotFound(PkgError):
    '''The container path cannot be opened or read.'''

    def __init__(self, path, reason=None):
        self.path = path
        self.reason = reason
        msg = "Cannot read file (%s)" % path
        if reason:
            msg += " (%s)" % reason
        super().__init__(msg)


class TruncatedHeader(PkgError):
    '''Fewer than PKG_HEADER_SIZE bytes are available.'''

    def __init__(self, size, expected):
        self.size = size
        self.expected = expected
        super().__init__(
            "Truncated header: %d bytes, expected %d" % (size, expected))


class OutputDirectoryError(PkgError):
    '''The output directory cannot be created or is not a directory.'''

    def __init__(self, path, reason=None):
        self.path = path
        self.reason = reason
        msg = "Cannot use output directory (%s)" % path
        if reason:
            msg += " (%s)" % reason
        super().__init__(msg)


class ItemError(PkgError):
    '''A failure attributed to one item slot.'''

    def __init__(self, index, device, msg):
        self.index = index
        self.device = device
        super().__init__(
            "item %d (dev %s): %s" % (index, device, msg))


class OutOfRangeItem(ItemError):
    '''The item's offset + length runs past the end of the container.'''

    def __init__(self, index, device, offset, length, size):
        self.offset = offset
        self.length = length
        self.size = size
        super().__init__(
            index, device,
            "range 0x%x+0x%x exceeds container size 0x%x" % (
                offset, length, size))


class OutputWriteError(ItemError):
    '''The item's output file cannot be created or written.'''

    def __init__(self, index, device, path, reason):
        self.path = path
        self.reason = reason
        super().__init__(
            index, device, "could not write (%s), (%s)" % (path, reason))

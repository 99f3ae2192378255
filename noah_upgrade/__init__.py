'''Noah upgrade container parser utils.
'''

from . import crc
from . import naming
from . import pkg

from .base import FirmwareObject, StructuredObject
from .errors import (
    PkgError, InputNotFound, TruncatedHeader, OutputDirectoryError,
    ItemError, OutOfRangeItem, OutputWriteError)
from .pkg import PkgFile, PkgHeader, PkgItem, ExtractedItem, extract_all


__title__ = "noah_upgrade"
__version__ = "1.2"
__author__ = "Noah Upgrade Tools Contributors"
__license__ = "BSD"

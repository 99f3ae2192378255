'''Table-driven CRC-32 (reflected, polynomial 0xEDB88320).

This is the zlib/Ethernet variant: initial value 0xFFFFFFFF and a final
complement. With the standard table the computation is delegated to zlib,
which produces identical results.
'''

import zlib

CRC32_POLYNOMIAL = 0xEDB88320


def build_table(polynomial=CRC32_POLYNOMIAL):
    '''Generate the 256-entry lookup table for a reflected CRC-32.

    Return:
        list: 256 unsigned 32-bit table entries.
    '''
    table = []
    for i in range(256):
        crc = i
        for _ in range(8):
            if crc & 1:
                crc = (crc >> 1) ^ polynomial
            else:
                crc >>= 1
        table.append(crc)
    return table


CRC32_TABLE = build_table()


def table_checksum(table, data):
    '''Compute a reflected CRC-32 of data using the provided table.'''
    crc = 0xFFFFFFFF
    for byte in bytearray(data):
        crc = (crc >> 8) ^ table[(crc ^ byte) & 0xFF]
    return ~crc & 0xFFFFFFFF


def checksum(data, table=None):
    '''Compute the CRC-32 of a byte sequence.

    Args:
        data (binary): bytes, bytearray or memoryview.
        table (Optional[list]): A table from build_table. When omitted the
            standard table is implied and zlib is used.

    Return:
        int: unsigned 32-bit checksum.
    '''
    if table is None or table == CRC32_TABLE:
        return zlib.crc32(data) & 0xFFFFFFFF
    return table_checksum(table, data)

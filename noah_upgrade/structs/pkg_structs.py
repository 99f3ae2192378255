# -*- coding: utf-8 -*-
import ctypes

int32_t = ctypes.c_int32
int64_t = ctypes.c_int64
uint32_t = ctypes.c_uint32
char = ctypes.c_char

PKG_HEADER_SIZE = 2048
PKG_NUM_ITEMS = 31
PKG_DEVICE_SIZE = 12

PKG_FSTYPES = {
    0: "none",
    1: "fat",
    2: "yaffs",
    3: "yaffs2",
    4: "ext2",
    5: "ram",
    6: "raw",
    7: "nor",
    8: "ubifs",
}

PKG_FSTYPE_UNKNOWN = "Unknown"

# Partition device basenames and the image name they are extracted as.
PKG_DEVICE_NAMES = {
    "mtd3":   "rootfs",
    "mtd4":   "Settings",
    "mtd5":   "ProgFS",
    "mtd6":   "DataFS",
    "mtd7":   "UsrFS",
    "mtd8":   "UsrDisk",
    "ubi0_0": "rootfs",
    "ubi0_1": "Settings",
    "ubi0_2": "ProgFS",
    "ubi0_3": "DataFS",
    "ubi0_6": "UsrDisk",
}

# Numeric (flash address) devices.
PKG_BOOTLOADER_ADDRESSES = (0x0, )
PKG_KERNEL_ADDRESSES = (0x400000, 0x500000)


class PkgItemType(ctypes.LittleEndianStructure):
    _pack_ = 1
    _fields_ = [
        ("Length",      uint32_t),  #
        ("Offset",      uint32_t),  # Absolute within the container
        ("Version",     int32_t),   #
        ("FsType",      int32_t),   # See PKG_FSTYPES
        ("Checksum",    uint32_t),  #
        ("Device",      char * PKG_DEVICE_SIZE),  # Not NUL-terminated
        ("Reserved",    char * 32),
    ]


class PkgHeaderType(ctypes.LittleEndianStructure):
    _pack_ = 1
    _fields_ = [
        ("Tag",         int64_t),
        ("Version",     int32_t),
        ("Reserved",    char * 52),
        ("Items",       PkgItemType * PKG_NUM_ITEMS),
    ]

import io
import os
import shutil
import stat
import tempfile
import unittest
import zlib
from contextlib import redirect_stdout

from noah_upgrade import crc
from noah_upgrade.errors import *
from noah_upgrade.pkg import (
    PkgFile, extract_all, read_container, prepare_output_directory)

from pkg_builder import build_container

PATTERN = bytes(range(0x10, 0x20))


class ExtractTest(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self.output = os.path.join(self.tmp, "out")

    def tearDown(self):
        shutil.rmtree(self.tmp)

    def _extract(self, data):
        with redirect_stdout(io.StringIO()):
            return extract_all(data, self.output)

    def _read(self, name):
        with open(os.path.join(self.output, name), 'rb') as fh:
            return fh.read()

    def test_single_item(self):
        data = build_container(
            {0: (PATTERN, dict(fstype=4, device=b"/dev/mtd4"))})
        result = self._extract(data)

        self.assertTrue(result.ok)
        self.assertEqual(len(result.items), 1)
        item = result.items[0]
        self.assertEqual(item.index, 0)
        self.assertEqual(item.name, "Settings.ext2")
        self.assertEqual(bytes(item.data), PATTERN)
        self.assertEqual(item.checksum, zlib.crc32(PATTERN) & 0xFFFFFFFF)
        self.assertEqual(item.checksum, crc.checksum(PATTERN))
        self.assertEqual(os.listdir(self.output), ["Settings.ext2"])
        self.assertEqual(self._read("Settings.ext2"), PATTERN)

    def test_output_directory_mode(self):
        self._extract(build_container({}))
        self.assertTrue(os.path.isdir(self.output))
        self.assertEqual(stat.S_IMODE(os.stat(self.output).st_mode) & 0o077, 0)

    def test_records(self):
        data = build_container({
            3: (b"kernel", dict(version=5, fstype=6, checksum=0x1234,
                                device=b"0x400000")),
        })
        result = self._extract(data)
        records = result.records
        self.assertEqual(len(records), 1)
        record = records[0]
        self.assertEqual(record["label"], "uImage")
        self.assertEqual(record["type"], "PkgItem")
        self.assertEqual(record["attrs"], {
            "length": 6,
            "offset": 2048,
            "version": 5,
            "fstype": "raw",
            "checksum": crc.checksum(b"kernel"),
            "device": b"0x400000\0\0\0\0",
        })

    def test_empty_slots_skipped(self):
        data = build_container({}, extra_items={
            4: dict(length=0, offset=2048, device=b"/dev/mtd3")})
        result = self._extract(data)
        self.assertEqual(result.items, [])
        self.assertEqual(result.records, [])
        self.assertEqual(os.listdir(self.output), [])

    def test_payload_not_deobfuscated(self):
        payload = b"\x01\x02\x55\xaa"
        data = build_container({1: (payload, dict(device=b"/dev/null"))})
        self._extract(data)
        self.assertEqual(self._read("uImage-initrd"), payload)

    def test_multiple_items(self):
        data = build_container({
            0: (b"uboot", dict(device=b"0")),
            1: (b"kernel", dict(device=b"4194304")),
            2: (b"initrd", dict(device=b"/dev/null")),
            5: (b"rootfs", dict(fstype=8, device=b"/dev/ubi0_0")),
            9: (b"blob", dict(device=b"misc")),
        })
        result = self._extract(data)
        self.assertTrue(result.ok)
        self.assertEqual(
            [i.name for i in result.items],
            ["u-boot-nand.bin", "uImage", "uImage-initrd", "rootfs.ubifs",
             "idx-9-file.bin"])
        self.assertEqual(self._read("rootfs.ubifs"), b"rootfs")
        self.assertEqual(self._read("idx-9-file.bin"), b"blob")

    def test_name_collision_last_wins(self):
        data = build_container({
            2: (b"first", dict(fstype=4, device=b"/dev/mtd3")),
            7: (b"second", dict(fstype=4, device=b"/dev/mtd3")),
        })
        result = self._extract(data)
        self.assertEqual(len(result.items), 2)
        self.assertEqual(self._read("rootfs.ext2"), b"second")

    def test_out_of_range(self):
        data = build_container(
            {0: (PATTERN, dict(fstype=4, device=b"/dev/mtd4"))},
            extra_items={
                1: dict(length=0x100, offset=2048, device=b"/dev/mtd5"),
                2: dict(length=1, offset=0xffffffff, device=b"/dev/mtd6"),
            })
        data += b"tail"
        result = self._extract(data)

        self.assertFalse(result.ok)
        self.assertEqual([e.index for e in result.errors], [1, 2])
        for error in result.errors:
            self.assertIsInstance(error, OutOfRangeItem)
        self.assertEqual(result.errors[0].device, "/dev/mtd5")
        self.assertEqual(result.errors[0].size, len(data))
        self.assertEqual([i.name for i in result.items], ["Settings.ext2"])
        self.assertEqual(os.listdir(self.output), ["Settings.ext2"])

    def test_item_at_end_of_container(self):
        data = build_container({0: (PATTERN, dict(device=b"/dev/mtd7"))})
        result = self._extract(data)
        self.assertTrue(result.ok)
        self.assertEqual(self._read("UsrFS.none"), PATTERN)

    def test_write_error_continues(self):
        data = build_container({
            0: (b"a", dict(device=b"/dev/mtd3")),
            1: (b"b", dict(device=b"/dev/mtd4")),
        })
        os.makedirs(os.path.join(self.output, "rootfs.none"))
        result = self._extract(data)

        self.assertEqual(len(result.errors), 1)
        error = result.errors[0]
        self.assertIsInstance(error, OutputWriteError)
        self.assertEqual(error.index, 0)
        self.assertEqual(error.device, "/dev/mtd3")
        self.assertEqual([i.name for i in result.items], ["Settings.none"])
        self.assertEqual(self._read("Settings.none"), b"b")

    def test_raw_device_bytes_in_name(self):
        data = build_container(
            {0: (PATTERN, dict(fstype=4, device=b"/dev/p\xe9"))})
        result = self._extract(data)
        self.assertTrue(result.ok)
        self.assertEqual(os.listdir(os.fsencode(self.output)), [b"p\xe9.ext2"])

    def test_dump_quiet(self):
        data = build_container({0: (PATTERN, dict(device=b"/dev/mtd4"))})
        container = PkgFile(data)
        container.process()
        prepare_output_directory(self.output)
        out = io.StringIO()
        with redirect_stdout(out):
            container.dump(self.output, quiet=True)
        self.assertEqual(out.getvalue(), "")
        self.assertEqual(self._read("Settings.none"), PATTERN)
        out = io.StringIO()
        with redirect_stdout(out):
            container.dump(self.output)
        self.assertIn("Wrote: ", out.getvalue())

    def test_truncated(self):
        with self.assertRaises(TruncatedHeader):
            self._extract(b"\0" * 100)
        self.assertFalse(os.path.exists(self.output))

    def test_output_not_a_directory(self):
        with open(self.output, 'wb') as fh:
            fh.write(b"x")
        with self.assertRaises(OutputDirectoryError):
            self._extract(build_container({}))


class PkgFileTest(unittest.TestCase):

    def test_valid_header(self):
        self.assertTrue(PkgFile(build_container({})).valid_header)
        container = PkgFile(b"short")
        self.assertFalse(container.valid_header)
        with self.assertRaises(TruncatedHeader):
            container.check_header()
        with self.assertRaises(TruncatedHeader):
            container.process()

    def test_process_checksums(self):
        data = build_container({
            0: (PATTERN, dict(checksum=0x11111111, device=b"/dev/mtd4"))})
        container = PkgFile(data)
        self.assertTrue(container.process())
        item = container.items[0]
        self.assertEqual(item.stored_checksum, 0x11111111)
        self.assertEqual(item.checksum, crc.checksum(PATTERN))
        self.assertEqual(item.structure.Checksum, item.checksum)
        self.assertEqual(container.objects, [item])
        self.assertEqual(len(container.iterate_objects()), 1)

    def test_showinfo(self):
        data = build_container({0: (PATTERN, dict(device=b"/dev/mtd4"))})
        container = PkgFile(data)
        container.process()
        out = io.StringIO()
        with redirect_stdout(out):
            container.showinfo()
        self.assertIn("Settings.none", out.getvalue())
        self.assertIn("0x%08X" % crc.checksum(PATTERN), out.getvalue())


class FilesTest(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmp)

    def test_read_container(self):
        path = os.path.join(self.tmp, "upgrade.bin")
        with open(path, 'wb') as fh:
            fh.write(b"data")
        self.assertEqual(read_container(path), b"data")

    def test_read_missing(self):
        with self.assertRaises(InputNotFound) as ctx:
            read_container(os.path.join(self.tmp, "missing.bin"))
        self.assertIn("missing.bin", str(ctx.exception))

    def test_prepare_existing(self):
        self.assertEqual(prepare_output_directory(self.tmp), self.tmp)

    @unittest.skipUnless(os.path.isdir("/proc"), "requires /proc")
    def test_prepare_not_writable(self):
        with self.assertRaises(OutputDirectoryError) as ctx:
            prepare_output_directory("/proc")
        self.assertEqual(ctx.exception.path, "/proc")

    def test_prepare_nested(self):
        path = os.path.join(self.tmp, "a", "b")
        prepare_output_directory(path)
        self.assertTrue(os.path.isdir(path))


if __name__ == '__main__':
    unittest.main()

import os
import tempfile
import unittest

from vmigrate.exceptions import EmptyInputError, InputError, InputFileNotFoundError
from vmigrate.input_loader import load_list, parse_lines


class TestParseLines(unittest.TestCase):

    def test_drops_comments_and_blank_lines(self):
        lines = ["# header\n", "vm-1\n", "\n", "   \n", "  # indented comment\n", "vm-2\n"]
        self.assertEqual(parse_lines(lines), ["vm-1", "vm-2"])

    def test_trims_whitespace_and_keeps_order(self):
        lines = ["  vm-c  \n", "\tvm-a\n", "vm-b"]
        self.assertEqual(parse_lines(lines), ["vm-c", "vm-a", "vm-b"])

    def test_keeps_duplicates(self):
        self.assertEqual(parse_lines(["vm-1", "vm-1", "vm-2", "vm-1"]), ["vm-1", "vm-1", "vm-2", "vm-1"])

    def test_hash_inside_entry_is_kept(self):
        self.assertEqual(parse_lines(["vm#1"]), ["vm#1"])


class TestLoadList(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def _write(self, name, content):
        path = os.path.join(self.tmpdir.name, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    def test_loads_entries(self):
        path = self._write("vms.txt", "# VMs\nvm-A\n\nvm-B\n")
        self.assertEqual(load_list(path, kind="VM list"), ["vm-A", "vm-B"])

    def test_missing_file(self):
        path = os.path.join(self.tmpdir.name, "missing.txt")
        with self.assertRaises(InputFileNotFoundError) as ctx:
            load_list(path, kind="VM list")
        self.assertIsInstance(ctx.exception, FileNotFoundError)
        self.assertIsInstance(ctx.exception, InputError)
        self.assertIn("missing.txt", str(ctx.exception))

    def test_only_comments_is_empty(self):
        path = self._write("hosts.txt", "# nothing here\n\n   \n")
        with self.assertRaises(EmptyInputError):
            load_list(path, kind="Target hosts")

    def test_empty_file(self):
        path = self._write("empty.txt", "")
        with self.assertRaises(EmptyInputError):
            load_list(path)

    def test_utf8_entries(self):
        path = self._write("vms.txt", "vm-é\n")
        self.assertEqual(load_list(path), ["vm-é"])


if __name__ == "__main__":
    unittest.main()

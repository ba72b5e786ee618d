"""
Tests for storage helpers and utility functions
"""

import io
import os
import tempfile
import unittest

from scan_fakes import write_bytes
from scanmate.errors import ValidationError
from scanmate.storage import (
    ContentResolver,
    StorageLocations,
    copy_references,
    copy_stream,
    path_to_uri,
    validate_output_name
)
from scanmate.utils import Timer, ensure_directory, get_system_info


class TestUtils(unittest.TestCase):
    """Test cases for utility functions"""

    def test_ensure_directory(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            test_dir = os.path.join(tmpdir, "test_dir")
            self.assertFalse(os.path.exists(test_dir))

            ensure_directory(test_dir)
            self.assertTrue(os.path.exists(test_dir))

            # Calling again should not raise an error
            ensure_directory(test_dir)

    def test_get_system_info(self):
        info = get_system_info()
        for key in ("platform", "python_version", "architecture", "system"):
            self.assertIn(key, info)
        self.assertTrue(info["python_version"])

    def test_timer(self):
        timer = Timer()
        self.assertEqual(timer.stop(), 0.0)
        timer.start()
        self.assertGreaterEqual(timer.stop(), 0.0)


class TestStorage(unittest.TestCase):
    """Test cases for content references and copying"""

    def test_validate_output_name(self):
        self.assertEqual(validate_output_name("invoice"), "invoice")
        self.assertEqual(validate_output_name("  invoice "), "invoice")
        for bad in ("", "   ", None, ".", "..", "a/b", "a\\b"):
            with self.assertRaises(ValidationError):
                validate_output_name(bad)

    def test_resolver_accepts_uri_and_path(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_bytes(tmpdir, "page one.jpg", b"IMG1")
            resolver = ContentResolver()
            with resolver.open_input_stream(path) as stream:
                self.assertEqual(stream.read(), b"IMG1")
            with resolver.open_input_stream(path_to_uri(path)) as stream:
                self.assertEqual(stream.read(), b"IMG1")

    def test_resolver_turns_nul_byte_into_os_error(self):
        resolver = ContentResolver()
        for reference in ("file:///tmp/a%00b.jpg", "/tmp/a\x00b.jpg"):
            with self.assertRaises(OSError):
                resolver.open_input_stream(reference)

    def test_resolver_rejects_unknown_scheme(self):
        with self.assertRaises(OSError):
            ContentResolver().open_input_stream("content://media/external/images/1")

    def test_copy_stream(self):
        source = io.BytesIO(b"x" * 200000)
        destination = io.BytesIO()
        self.assertEqual(copy_stream(source, destination), 200000)
        self.assertEqual(destination.getvalue(), b"x" * 200000)

    def test_copy_references_creates_directory(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            a = write_bytes(tmpdir, "a", b"AB")
            b = write_bytes(tmpdir, "b", b"CD")
            destination = os.path.join(tmpdir, "nested", "out.pdf")

            written = copy_references(ContentResolver(), [a, b], destination)

            self.assertEqual(written, 4)
            with open(destination, "rb") as f:
                self.assertEqual(f.read(), b"ABCD")

    def test_storage_locations(self):
        storage = StorageLocations("/data/files", "/sdcard/Documents")
        self.assertEqual(storage.private_file("scan"), os.path.join("/data/files", "scan.pdf"))
        self.assertEqual(storage.public_document("scan"),
                         os.path.join("/sdcard/Documents", "scan.pdf"))


if __name__ == '__main__':
    unittest.main()

"""
Tests for the headless ScanMate screen
"""

import os
import tempfile
import unittest

from scan_fakes import BlockingResolver, FakeEngine, write_bytes
from scanmate.app import MAX_NOTICES, Notice, ScanMateApp
from scanmate.config import ScanMateConfig
from scanmate.engine import CaptureResult
from scanmate.permissions import Permission, PermissionManager


class TestScanMateApp(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmpdir = self._tmp.name
        self.config = ScanMateConfig(
            documents_dir=os.path.join(self.tmpdir, "Documents"),
            files_dir=os.path.join(self.tmpdir, "files"),
            cache_dir=os.path.join(self.tmpdir, "cache"),
        )
        self.engine = FakeEngine()
        self.app = ScanMateApp(self.engine, config=self.config)
        self.app.start()
        self.page_a = write_bytes(self.tmpdir, "A.jpg", b"IMG1")
        self.page_b = write_bytes(self.tmpdir, "B.jpg", b"IMG2")

    def tearDown(self):
        self.app.close()
        self._tmp.cleanup()

    def _scan(self, pages, combined=None):
        future = self.app.scan()
        self.assertIsNotNone(future)
        self.engine.complete(CaptureResult.ok(pages, combined))

    def test_scan_without_name_shows_notice(self):
        self.assertIsNone(self.app.scan())
        self.assertEqual(self.engine.calls, 0)
        self.assertEqual(self.app.notices, [Notice(Notice.ERROR, "Please enter a file name")])

    def test_engine_unavailable_shows_notice(self):
        app = ScanMateApp(FakeEngine(error=RuntimeError("scanner module missing")),
                          config=self.config)
        app.set_file_name("invoice")
        self.assertIsNone(app.scan())
        self.assertEqual(app.notices[0].message, "scanner module missing")

    def test_save_enabled_only_with_pages(self):
        self.app.set_file_name("invoice")
        self.assertTrue(self.app.scan_enabled)
        self.assertFalse(self.app.save_enabled)
        self._scan([self.page_a])
        self.assertTrue(self.app.save_enabled)

    def test_scan_and_save(self):
        self.app.set_file_name("invoice")
        self._scan([self.page_a, self.page_b])
        self.assertEqual(self.app.pages, [self.page_a, self.page_b])

        path = self.app.save()

        self.assertEqual(path, os.path.join(self.config.documents_dir, "invoice.pdf"))
        with open(path, "rb") as f:
            self.assertEqual(f.read(), b"IMG1IMG2")
        self.assertEqual(self.app.file_name, "")
        self.assertEqual(self.app.pages, [])
        self.assertEqual(self.app.notices[-1],
                         Notice(Notice.INFO, f"File saved successfully to {path}"))

    def test_failed_save_keeps_state(self):
        missing = os.path.join(self.tmpdir, "missing.jpg")
        self.app.set_file_name("invoice")
        self._scan([missing])

        self.assertIsNone(self.app.save())

        self.assertEqual(self.app.file_name, "invoice")
        self.assertEqual(self.app.pages, [missing])
        notice = self.app.notices[-1]
        self.assertEqual(notice.level, Notice.ERROR)
        self.assertTrue(notice.message.startswith("Failed to save file:"))

    def test_permission_denied_is_a_notice(self):
        permissions = PermissionManager(requester=lambda p: False)
        app = ScanMateApp(FakeEngine(), config=self.config, permissions=permissions)
        app.start()
        app.set_file_name("invoice")
        app.session.replace_pages([self.page_a])

        self.assertIsNone(app.save())

        messages = [n.message for n in app.notices]
        self.assertIn("READ_MEDIA_IMAGES permission denied", messages)
        self.assertEqual(messages.count("WRITE_EXTERNAL_STORAGE permission denied"), 2)
        self.assertFalse(os.path.exists(self.config.documents_dir))
        self.assertFalse(permissions.is_granted(Permission.WRITE_EXTERNAL_STORAGE))

    def test_combined_document_warning(self):
        self.app.set_file_name("invoice")
        self._scan([self.page_a], os.path.join(self.tmpdir, "gone.pdf"))
        self.assertEqual(self.app.notices[-1].level, Notice.WARNING)
        self.assertEqual(self.app.pages, [self.page_a])

    def test_combined_document_saved(self):
        combined = write_bytes(self.tmpdir, "scan.pdf", b"%PDF")
        self.app.set_file_name("invoice")
        self._scan([self.page_a], combined)
        self.assertTrue(os.path.exists(os.path.join(self.config.files_dir, "invoice.pdf")))
        self.assertEqual(self.app.notices, [])

    def test_save_async(self):
        self.app.set_file_name("invoice")
        self._scan([self.page_a])

        future = self.app.save_async()
        path = future.result(timeout=10)
        self.app.exporter.shutdown()

        self.assertTrue(os.path.exists(path))
        self.assertEqual(self.app.notices[-1].level, Notice.INFO)
        self.assertFalse(self.app.export_running)

    def test_scan_refused_while_exporting(self):
        self.app.set_file_name("invoice")
        self._scan([self.page_a])
        resolver = BlockingResolver()
        self.app.exporter.resolver = resolver

        future = self.app.save_async()
        try:
            self.assertTrue(resolver.started.wait(timeout=10))
            self.assertFalse(self.app.scan_enabled)
            self.assertFalse(self.app.save_enabled)
            self.assertIsNone(self.app.scan())
            self.assertEqual(self.engine.calls, 1)
            self.assertEqual(self.app.notices[-1].level, Notice.WARNING)
        finally:
            resolver.release.set()
        future.result(timeout=10)
        self.app.exporter.shutdown()

        self.assertTrue(self.app.scan_enabled)
        self.assertEqual(self.app.pages, [])

    def test_capture_landing_during_export_is_kept(self):
        self.app.set_file_name("invoice")
        self._scan([self.page_a])
        pending_scan = self.app.scan()
        resolver = BlockingResolver()
        self.app.exporter.resolver = resolver

        future = self.app.save_async()
        try:
            self.assertTrue(resolver.started.wait(timeout=10))
            self.engine.complete(CaptureResult.ok([self.page_b]))
            self.assertTrue(pending_scan.done())
        finally:
            resolver.release.set()
        path = future.result(timeout=10)
        self.app.exporter.shutdown()

        with open(path, "rb") as f:
            self.assertEqual(f.read(), b"IMG1")
        self.assertEqual(self.app.pages, [self.page_b])
        self.assertEqual(self.app.file_name, "invoice")

    def test_invalid_page_reference_is_a_notice(self):
        self.app.set_file_name("invoice")
        self._scan(["file:///tmp/a%00b.jpg"])

        self.assertIsNone(self.app.save())

        notice = self.app.notices[-1]
        self.assertEqual(notice.level, Notice.ERROR)
        self.assertTrue(notice.message.startswith("Failed to save file:"))
        self.assertEqual(self.app.file_name, "invoice")

    def test_notices_are_capped(self):
        for i in range(MAX_NOTICES + 5):
            self.app.notify(Notice.INFO, f"message {i}")

        notices = self.app.notices
        self.assertEqual(len(notices), MAX_NOTICES)
        self.assertEqual(notices[0].message, "message 5")
        self.assertEqual(notices[-1].message, f"message {MAX_NOTICES + 4}")

    def test_dismiss_notice(self):
        self.app.scan()
        notice = self.app.dismiss_notice()
        self.assertEqual(notice.message, "Please enter a file name")
        self.assertEqual(self.app.notices, [])
        self.assertIsNone(self.app.dismiss_notice())


if __name__ == '__main__':
    unittest.main()

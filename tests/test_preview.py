"""
Tests for page previews
"""

import os
import tempfile
import unittest

import cv2
import numpy as np

from scan_fakes import write_bytes
from scanmate.config import APP_TITLE
from scanmate.preview import PAGE_SPACING, load_thumbnail, render_page_strip, show_preview
from scanmate.storage import path_to_uri


class TestPreview(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmpdir = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def _image(self, name, height, width):
        path = os.path.join(self.tmpdir, name)
        cv2.imwrite(path, np.full((height, width, 3), 128, dtype="uint8"))
        return path

    def test_thumbnail_fills_width(self):
        thumb = load_thumbnail(self._image("wide.png", 100, 200), width=360)
        self.assertEqual(thumb.shape, (180, 360, 3))

    def test_strip_stacks_pages(self):
        pages = [self._image("a.png", 100, 200), path_to_uri(self._image("b.png", 300, 100))]

        strip = render_page_strip(pages, width=360)

        self.assertEqual(strip.shape, (180 + 1080 + PAGE_SPACING, 360, 3))

    def test_window_title_defaults_to_app_title(self):
        self.assertEqual(show_preview.__defaults__, (APP_TITLE,))

    def test_undecodable_pages_are_skipped(self):
        bad = write_bytes(self.tmpdir, "bad.jpg", b"IMG1")
        empty = write_bytes(self.tmpdir, "empty.jpg", b"")
        missing = os.path.join(self.tmpdir, "missing.jpg")
        self.assertIsNone(render_page_strip([bad, empty, missing]))

        good = self._image("good.png", 50, 50)
        strip = render_page_strip([bad, good], width=100)
        self.assertEqual(strip.shape, (100, 100, 3))


if __name__ == '__main__':
    unittest.main()

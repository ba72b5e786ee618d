"""
Boundary to the document scanning engine

A scan engine is configured once with ScannerOptions and started with
start_scan(), which returns a concurrent.futures.Future resolving to exactly
one CaptureResult. GalleryScanEngine is the bundled engine: it imports
gallery images, straightens and cleans them with OpenCV, and writes JPEG
pages and a combined PDF into its cache directory.
"""

import os
import logging
from concurrent.futures import ThreadPoolExecutor
from enum import Enum

from tqdm import tqdm

from . import config as defaults
from .document import encode_jpeg, images_to_pdf, load_image, scan_page
from .errors import EngineUnavailable
from .storage import path_to_uri
from .utils import Timer, ensure_directory, timestamp

logger = logging.getLogger(__name__)

FORMAT_IMAGE = "image"
FORMAT_COMBINED = "combined-document"


class ResultCode(Enum):
    OK = "ok"
    CANCELLED = "cancelled"


class ScannerOptions:
    """Fixed capability profile handed to the engine"""

    def __init__(self, scanner_mode=defaults.DEFAULT_SCANNER_MODE,
                 gallery_import_allowed=defaults.DEFAULT_GALLERY_IMPORT,
                 page_limit=defaults.DEFAULT_PAGE_LIMIT,
                 result_formats=defaults.DEFAULT_RESULT_FORMATS):
        if scanner_mode not in ("base", "full"):
            raise ValueError(f"Unknown scanner mode: {scanner_mode}")
        if int(page_limit) < 1:
            raise ValueError("page_limit must be at least 1")
        formats = frozenset(result_formats)
        if not formats or formats - {FORMAT_IMAGE, FORMAT_COMBINED}:
            raise ValueError(f"Invalid result formats: {sorted(formats)}")
        self.scanner_mode = scanner_mode
        self.gallery_import_allowed = bool(gallery_import_allowed)
        self.page_limit = int(page_limit)
        self.result_formats = formats

    @classmethod
    def from_config(cls, config):
        return cls(
            scanner_mode=config.scanner_mode,
            gallery_import_allowed=config.gallery_import_allowed,
            page_limit=config.page_limit,
            result_formats=config.result_formats,
        )

    def __repr__(self):
        return (f"ScannerOptions(scanner_mode={self.scanner_mode!r}, "
                f"gallery_import_allowed={self.gallery_import_allowed}, "
                f"page_limit={self.page_limit}, "
                f"result_formats={sorted(self.result_formats)})")


class CaptureResult:
    """Completion signal of one scan: result code, ordered pages, optional combined document"""

    def __init__(self, result_code, pages=(), combined_document=None):
        self.result_code = result_code
        self.pages = tuple(pages)
        self.combined_document = combined_document

    @classmethod
    def ok(cls, pages, combined_document=None):
        return cls(ResultCode.OK, pages, combined_document)

    @classmethod
    def cancelled(cls):
        return cls(ResultCode.CANCELLED)

    @property
    def is_ok(self):
        return self.result_code is ResultCode.OK

    def __repr__(self):
        return (f"CaptureResult({self.result_code.value}, pages={len(self.pages)}, "
                f"combined_document={self.combined_document!r})")


class ScanEngine:
    """Interface every scanning engine implements"""

    def start_scan(self, options):
        """
        Launch a scan

        Args:
            options: ScannerOptions for this scan

        Returns:
            concurrent.futures.Future resolving to a CaptureResult

        Raises:
            EngineUnavailable: if the engine cannot start
        """
        raise NotImplementedError

    def shutdown(self):
        pass


class GalleryScanEngine(ScanEngine):
    """
    Scan engine that imports images picked from a gallery

    The picker is called on the engine's worker thread with the page limit
    and returns the image paths the user chose; an empty selection cancels
    the scan.
    """

    def __init__(self, picker, cache_dir, enhancement_mode="auto", show_progress=False):
        """
        Args:
            picker (callable): picker(page_limit) -> list of image paths
            cache_dir (str): Directory the engine owns for scanned pages
            enhancement_mode (str): Enhancement used in full scanner mode
            show_progress (bool): Show a tqdm progress bar while processing
        """
        self.picker = picker
        self.cache_dir = cache_dir
        self.enhancement_mode = enhancement_mode
        self.show_progress = show_progress
        self._executor = None

    def start_scan(self, options):
        if not options.gallery_import_allowed:
            raise EngineUnavailable("Camera capture is not available; gallery import is disabled")
        if self.picker is None:
            raise EngineUnavailable("No image picker configured")
        try:
            ensure_directory(self.cache_dir)
        except OSError as e:
            raise EngineUnavailable(f"Scanner cache is not writable: {e}") from e

        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="scan-engine")
        logger.info("Starting scan with %r", options)
        return self._executor.submit(self._run_scan, options)

    def _run_scan(self, options):
        selected = list(self.picker(options.page_limit) or [])
        if not selected:
            logger.info("Scan cancelled: no images selected")
            return CaptureResult.cancelled()

        if len(selected) > options.page_limit:
            logger.warning("Selected %d images, keeping the first %d",
                           len(selected), options.page_limit)
            selected = selected[:options.page_limit]

        timer = Timer()
        timer.start()
        scan_dir = os.path.join(self.cache_dir, f"scan_{timestamp()}")
        ensure_directory(scan_dir)

        pages = []
        page_images = []
        for index, path in enumerate(tqdm(selected, desc="Scanning pages", unit="page",
                                          disable=not self.show_progress), start=1):
            image = scan_page(load_image(path), options.scanner_mode, self.enhancement_mode)
            page_images.append(image)
            if FORMAT_IMAGE in options.result_formats:
                page_path = os.path.join(scan_dir, f"page_{index:03d}.jpg")
                with open(page_path, "wb") as f:
                    f.write(encode_jpeg(image))
                pages.append(path_to_uri(page_path))

        combined = None
        if FORMAT_COMBINED in options.result_formats:
            pdf_path = os.path.join(scan_dir, "scan.pdf")
            with open(pdf_path, "wb") as f:
                images_to_pdf(page_images, f)
            combined = path_to_uri(pdf_path)

        logger.info("Scanned %d page(s) in %.2fs", len(page_images), timer.stop())
        return CaptureResult.ok(pages, combined)

    def shutdown(self):
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

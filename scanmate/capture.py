"""
Capture coordinator: starts scans and absorbs their results into the session
"""

import logging
import threading
import weakref

from .engine import CaptureResult, ScannerOptions
from .errors import EngineUnavailable, ValidationError
from .storage import ContentResolver, copy_references, validate_output_name

logger = logging.getLogger(__name__)


def _call_now(fn, *args):
    fn(*args)


class CaptureCoordinator:
    """
    Bridges the scan action to the engine

    start_capture() never blocks: it registers a completion callback on the
    engine's future and returns it. The callback is run through `dispatch`,
    a callable(fn, *args), so a screen can move it onto its own event loop.
    """

    def __init__(self, session, engine, storage, options=None, resolver=None,
                 on_warning=None, on_error=None, dispatch=None):
        self.session = session
        self.engine = engine
        self.storage = storage
        self.options = options or ScannerOptions()
        self.resolver = resolver or ContentResolver()
        self.on_warning = on_warning
        self.on_error = on_error
        self.dispatch = dispatch or _call_now
        self._delivered = weakref.WeakSet()
        self._lock = threading.Lock()

    def start_capture(self):
        """
        Launch the engine for a new scan

        Returns:
            Future resolving to the engine's CaptureResult

        Raises:
            ValidationError: if no output name is set; the engine is not started
            EngineUnavailable: if the engine cannot start
        """
        validate_output_name(self.session.output_name)
        try:
            future = self.engine.start_scan(self.options)
        except EngineUnavailable:
            raise
        except Exception as e:
            raise EngineUnavailable(str(e) or e.__class__.__name__) from e

        future.add_done_callback(lambda f: self.dispatch(self._deliver, f))
        return future

    def _deliver(self, future):
        with self._lock:
            if future in self._delivered:
                return
            self._delivered.add(future)

        if future.cancelled():
            self.on_capture_complete(CaptureResult.cancelled())
            return

        exc = future.exception()
        if exc is not None:
            logger.error("Scan failed: %s", exc)
            if self.on_error is not None:
                error = exc if isinstance(exc, EngineUnavailable) else EngineUnavailable(str(exc))
                self.on_error(error)
            return

        self.on_capture_complete(future.result())

    def on_capture_complete(self, result):
        """
        Apply a completion signal to the session

        Returns:
            bool: True if the session was updated
        """
        if not result.is_ok:
            logger.info("Scan cancelled, keeping %d existing page(s)", len(self.session))
            return False

        self.session.replace_pages(result.pages, result.combined_document)
        logger.info("Scan complete: %d page(s)", len(result.pages))

        if result.combined_document is not None:
            self._persist_combined(result.combined_document)
        return True

    def _persist_combined(self, reference):
        """Copy the engine's combined document to the app-private files area"""
        try:
            name = validate_output_name(self.session.output_name)
            destination = self.storage.private_file(name)
            copy_references(self.resolver, [reference], destination)
        except (OSError, ValidationError) as e:
            message = f"Failed to save file: {e}"
            logger.warning(message)
            if self.on_warning is not None:
                self.on_warning(message)
            return None
        logger.info("Saved combined document to %s", destination)
        return destination

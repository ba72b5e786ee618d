"""
Headless model of the single ScanMate screen

The screen has a file-name field, a list of page previews, a scan action and a
save action. Errors never escape the screen: each one becomes a transient,
dismissible notice.
"""

import logging
import threading

from .capture import CaptureCoordinator
from .config import ScanMateConfig
from .engine import ScannerOptions
from .errors import ExportFailed, ScanMateError
from .export import ExportManager
from .permissions import FilesystemRequester, PermissionManager
from .session import Session
from .storage import StorageLocations

logger = logging.getLogger(__name__)

MAX_NOTICES = 50


class Notice:
    """A transient message shown to the user"""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    def __init__(self, level, message):
        self.level = level
        self.message = message

    def __eq__(self, other):
        return isinstance(other, Notice) and (self.level, self.message) == (other.level, other.message)

    def __repr__(self):
        return f"Notice({self.level!r}, {self.message!r})"


def describe_error(error):
    """Text of the notice shown for a workflow error"""
    if isinstance(error, ExportFailed):
        return f"Failed to save file: {error.reason}"
    return str(error)


class ScanMateApp:
    """Wires the session, coordinator, export manager and permissions together"""

    def __init__(self, engine, config=None, permissions=None, dispatch=None):
        """
        Args:
            engine: ScanEngine used by the scan action
            config: ScanMateConfig; defaults are used when omitted
            permissions: PermissionManager; defaults to filesystem checks
            dispatch: callable(fn, *args) used to deliver engine callbacks
        """
        self.config = config or ScanMateConfig()
        self.engine = engine
        self.session = Session()
        self.storage = StorageLocations.from_config(self.config)
        self._notices = []
        self._notice_lock = threading.Lock()
        self._pending_export = None

        if permissions is None:
            permissions = PermissionManager(FilesystemRequester(self.config.documents_dir))
        if permissions.on_denied is None:
            permissions.on_denied = lambda message: self.notify(Notice.WARNING, message)
        self.permissions = permissions

        self.coordinator = CaptureCoordinator(
            self.session,
            engine,
            self.storage,
            options=ScannerOptions.from_config(self.config),
            on_warning=lambda message: self.notify(Notice.WARNING, message),
            on_error=self._report_error,
            dispatch=dispatch,
        )
        self.exporter = ExportManager(
            self.session,
            self.storage,
            permissions=self.permissions,
            strategy=self.config.export_strategy,
            empty_policy=self.config.empty_export_policy,
        )

    def start(self):
        """Request storage permissions, as the screen does when it opens"""
        return self.permissions.request_storage_permissions()

    @property
    def file_name(self):
        return self.session.output_name

    def set_file_name(self, name):
        self.session.set_output_name(name)

    @property
    def pages(self):
        return self.session.pages

    @property
    def scan_enabled(self):
        return not self.export_running

    @property
    def export_running(self):
        pending = self._pending_export
        return self.exporter.in_progress or (pending is not None and not pending.done())

    @property
    def save_enabled(self):
        return self.session.has_pages and not self.export_running

    @property
    def notices(self):
        with self._notice_lock:
            return list(self._notices)

    def notify(self, level, message):
        logger.log(logging.WARNING if level != Notice.INFO else logging.INFO, message)
        with self._notice_lock:
            self._notices.append(Notice(level, message))
            # Oldest notices go first when nobody dismisses them
            del self._notices[:-MAX_NOTICES]

    def dismiss_notice(self, index=0):
        with self._notice_lock:
            if 0 <= index < len(self._notices):
                return self._notices.pop(index)
        return None

    def _report_error(self, error):
        self.notify(Notice.ERROR, describe_error(error))

    def scan(self):
        """
        Handle the scan action

        Returns:
            The engine future, or None if the scan could not start
        """
        if self.export_running:
            self.notify(Notice.WARNING, "Wait for the current export to finish before scanning")
            return None
        try:
            return self.coordinator.start_capture()
        except ScanMateError as e:
            self._report_error(e)
            return None

    def save(self):
        """
        Handle the save action synchronously

        Returns:
            str: Path of the saved file, or None on failure
        """
        if self.export_running:
            self.notify(Notice.WARNING, "An export is already in progress")
            return None
        try:
            path = self.exporter.export_to_public_storage()
        except ScanMateError as e:
            self._report_error(e)
            return None
        self.notify(Notice.INFO, f"File saved successfully to {path}")
        return path

    def save_async(self):
        """
        Handle the save action on the export worker

        Returns:
            Future of the saved path, or None if an export is already running
        """
        if self.export_running:
            self.notify(Notice.WARNING, "An export is already in progress")
            return None
        future = self.exporter.export_async()
        self._pending_export = future
        future.add_done_callback(self._export_done)
        return future

    def _export_done(self, future):
        exc = future.exception()
        if exc is None:
            self.notify(Notice.INFO, f"File saved successfully to {future.result()}")
        elif isinstance(exc, ScanMateError):
            self._report_error(exc)
        else:
            logger.error("Unexpected export error: %s", exc)
            self.notify(Notice.ERROR, f"Failed to save file: {exc}")

    def close(self):
        self.exporter.shutdown()
        self.engine.shutdown()

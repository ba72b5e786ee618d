"""
Export manager: writes the session's pages into one named file in public storage
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor

from .errors import ExportFailed, ExportInProgress, NothingToExport
from .permissions import Permission
from .storage import ContentResolver, copy_references, validate_output_name

logger = logging.getLogger(__name__)


class ExportManager:
    """
    Materializes page references as <documents_dir>/<name>.pdf

    Args:
        session: Session to read defaults from; cleared on success unless it
            changed while the export ran
        storage: StorageLocations providing the public documents directory
        permissions: PermissionManager checked before any write, or None
        resolver: ContentResolver used to open page references
        strategy: "concatenate" copies every page stream in order;
            "combined" copies the engine's combined document when the
            session holds one and falls back to concatenation otherwise
        empty_policy: "allow" writes an empty file for an empty page list,
            "reject" raises NothingToExport
    """

    def __init__(self, session, storage, permissions=None, resolver=None,
                 strategy="concatenate", empty_policy="allow"):
        if strategy not in ("concatenate", "combined"):
            raise ValueError(f"Unknown export strategy: {strategy}")
        if empty_policy not in ("allow", "reject"):
            raise ValueError(f"Unknown empty export policy: {empty_policy}")
        self.session = session
        self.storage = storage
        self.permissions = permissions
        self.resolver = resolver or ContentResolver()
        self.strategy = strategy
        self.empty_policy = empty_policy
        self._lock = threading.Lock()
        self._executor = None

    @property
    def in_progress(self):
        return self._lock.locked()

    def export_to_public_storage(self, output_name=None, page_references=None):
        """
        Write the pages into a single output file

        Args:
            output_name: Base name of the file; defaults to the session's name
            page_references: Ordered references; default to the session's pages

        Returns:
            str: Path of the written file

        Raises:
            ValidationError: empty or invalid name, before any I/O
            NothingToExport: no pages and the empty policy is "reject"
            PermissionDenied: write permission missing
            ExportInProgress: another export is running
            ExportFailed: any I/O error; the session is left unchanged
        """
        generation, session_name, session_pages, combined = self.session.versioned_snapshot()
        name = validate_output_name(session_name if output_name is None else output_name)
        references = session_pages if page_references is None else list(page_references)

        if self.strategy == "combined" and combined is not None and page_references is None:
            references = [combined]

        if not references and self.empty_policy == "reject":
            raise NothingToExport("There are no scanned pages to save")

        if self.permissions is not None:
            self.permissions.require(Permission.WRITE_EXTERNAL_STORAGE)

        if not self._lock.acquire(blocking=False):
            raise ExportInProgress()
        try:
            destination = self.storage.public_document(name)
            try:
                written = copy_references(self.resolver, references, destination)
            except OSError as e:
                logger.error("Export to %s failed: %s", destination, e)
                raise ExportFailed(str(e)) from e
        finally:
            self._lock.release()

        logger.info("Exported %d reference(s), %d bytes, to %s",
                    len(references), written, destination)
        if not self.session.clear_if_unchanged(generation):
            logger.info("Session changed during export, keeping its new state")
        return destination

    def export_async(self, output_name=None, page_references=None):
        """Run export_to_public_storage on a background worker; returns a Future"""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="export")
        return self._executor.submit(self.export_to_public_storage, output_name, page_references)

    def shutdown(self):
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

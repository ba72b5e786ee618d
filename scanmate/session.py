"""
In-memory scan session shared by the capture coordinator and the export manager
"""

import logging
import threading

logger = logging.getLogger(__name__)


class Session:
    """
    Pages returned by the latest capture plus the chosen output name.

    The session is owned by the screen and passed by reference to the
    coordinator and the export manager. It is only changed through
    replace_pages(), set_output_name(), clear() and clear_if_unchanged();
    listeners registered with subscribe() are called with the session after
    every change.
    """

    def __init__(self, output_name=""):
        self._lock = threading.RLock()
        self._pages = []
        self._combined_document = None
        self._output_name = output_name
        self._listeners = []
        self._generation = 0

    @property
    def pages(self):
        with self._lock:
            return list(self._pages)

    @property
    def combined_document(self):
        return self._combined_document

    @property
    def output_name(self):
        return self._output_name

    @property
    def has_pages(self):
        with self._lock:
            return bool(self._pages)

    def subscribe(self, listener):
        """Register a callable(session); returns a function that unsubscribes it"""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_output_name(self, name):
        with self._lock:
            self._output_name = name or ""
            self._generation += 1
        self._notify()

    def replace_pages(self, pages, combined_document=None):
        """Replace the page list with the result of a new capture"""
        with self._lock:
            self._pages = list(pages)
            self._combined_document = combined_document
            self._generation += 1
        logger.debug("Session now holds %d page(s)", len(self._pages))
        self._notify()

    def clear(self):
        """Drop all pages and reset the output name"""
        with self._lock:
            self._pages = []
            self._combined_document = None
            self._output_name = ""
            self._generation += 1
        self._notify()

    def snapshot(self):
        """Return (output_name, pages, combined_document) read atomically"""
        with self._lock:
            return self._output_name, list(self._pages), self._combined_document

    @property
    def generation(self):
        """Counter bumped by every change; lets a writer detect concurrent edits"""
        with self._lock:
            return self._generation

    def versioned_snapshot(self):
        """Return (generation, output_name, pages, combined_document) read atomically"""
        with self._lock:
            return self._generation, self._output_name, list(self._pages), self._combined_document

    def clear_if_unchanged(self, generation):
        """
        Clear the session only if nothing changed since `generation` was read

        Returns:
            bool: True if the session was cleared
        """
        with self._lock:
            if self._generation != generation:
                return False
            self._pages = []
            self._combined_document = None
            self._output_name = ""
            self._generation += 1
        self._notify()
        return True

    def _notify(self):
        for listener in list(self._listeners):
            listener(self)

    def __len__(self):
        with self._lock:
            return len(self._pages)

    def __repr__(self):
        return f"Session(output_name={self._output_name!r}, pages={len(self)})"

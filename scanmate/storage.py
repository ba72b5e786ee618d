"""
Storage helpers: content references, storage locations and stream copying
"""

import os
import shutil
import logging
from urllib.parse import unquote, urlparse
from urllib.request import pathname2url

from .config import OUTPUT_EXTENSION
from .errors import ValidationError
from .utils import ensure_directory

logger = logging.getLogger(__name__)

COPY_BUFFER_SIZE = 64 * 1024


def path_to_uri(path):
    """Turn a filesystem path into a file:// content reference"""
    return "file://" + pathname2url(os.path.abspath(path))


class ContentResolver:
    """Opens content references (file:// URIs or plain paths) for reading"""

    def resolve_path(self, reference):
        reference = str(reference)
        parsed = urlparse(reference)
        if parsed.scheme == "file":
            return unquote(parsed.path)
        if parsed.scheme and len(parsed.scheme) > 1:
            raise OSError(f"Unsupported content scheme: {parsed.scheme}")
        return reference

    def open_input_stream(self, reference):
        """Open the referenced bytes; raises OSError if they cannot be read"""
        path = self.resolve_path(reference)
        try:
            return open(path, "rb")
        except ValueError as e:
            # open() rejects paths with embedded NUL bytes with ValueError
            raise OSError(f"Invalid content reference {reference!r}: {e}") from e


class StorageLocations:
    """The two writable areas: app-private files and public documents"""

    def __init__(self, files_dir, documents_dir):
        self.files_dir = files_dir
        self.documents_dir = documents_dir

    @classmethod
    def from_config(cls, config):
        return cls(config.files_dir, config.documents_dir)

    def private_file(self, output_name):
        return os.path.join(self.files_dir, output_name + OUTPUT_EXTENSION)

    def public_document(self, output_name):
        return os.path.join(self.documents_dir, output_name + OUTPUT_EXTENSION)


def validate_output_name(name):
    """
    Check a user-supplied output name and return it stripped

    Raises:
        ValidationError: if the name is empty or would escape its directory
    """
    name = (name or "").strip()
    if not name:
        raise ValidationError("Please enter a file name")
    if name in (".", "..") or "/" in name or "\\" in name or "\x00" in name:
        raise ValidationError(f"Invalid file name: {name!r}")
    return name


def copy_stream(source, destination):
    """Copy everything from one binary stream to another; returns bytes copied"""
    start = destination.tell()
    shutil.copyfileobj(source, destination, COPY_BUFFER_SIZE)
    return destination.tell() - start


def copy_references(resolver, references, destination_path):
    """
    Write the byte content of each reference, in order, into one file

    Args:
        resolver: ContentResolver used to open each reference
        references: Ordered page references
        destination_path: File to create or truncate

    Returns:
        int: Number of bytes written
    """
    ensure_directory(os.path.dirname(destination_path) or ".")
    total = 0
    with open(destination_path, "wb") as out:
        for reference in references:
            with resolver.open_input_stream(reference) as stream:
                total += copy_stream(stream, out)
    logger.debug("Wrote %d bytes from %d reference(s) to %s",
                 total, len(references), destination_path)
    return total

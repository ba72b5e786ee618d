"""
Storage and media permissions
"""

import os
import logging
import threading
from enum import Enum

from .errors import PermissionDenied

logger = logging.getLogger(__name__)


class Permission(Enum):
    READ_MEDIA_IMAGES = "READ_MEDIA_IMAGES"
    WRITE_EXTERNAL_STORAGE = "WRITE_EXTERNAL_STORAGE"

    def __str__(self):
        return self.value


STORAGE_PERMISSIONS = (Permission.READ_MEDIA_IMAGES, Permission.WRITE_EXTERNAL_STORAGE)


def _existing_parent(path):
    path = os.path.abspath(path)
    while not os.path.exists(path):
        parent = os.path.dirname(path)
        if parent == path:
            break
        path = parent
    return path


class FilesystemRequester:
    """Grants a permission when the matching directory is accessible to this process"""

    def __init__(self, documents_dir, media_dir=None):
        self.documents_dir = documents_dir
        self.media_dir = media_dir or documents_dir

    def __call__(self, permission):
        if permission is Permission.WRITE_EXTERNAL_STORAGE:
            return os.access(_existing_parent(self.documents_dir), os.W_OK)
        if permission is Permission.READ_MEDIA_IMAGES:
            return os.access(_existing_parent(self.media_dir), os.R_OK)
        return False


class PermissionManager:
    """
    Tracks which permissions are granted

    Args:
        requester: callable(permission) -> bool asked for missing permissions
        granted: permissions granted up front
        on_denied: callable(message) called once per refused permission
    """

    def __init__(self, requester, granted=(), on_denied=None):
        self.requester = requester
        self.on_denied = on_denied
        self._granted = set(granted)
        self._lock = threading.Lock()

    def is_granted(self, permission):
        with self._lock:
            return permission in self._granted

    def grant(self, permission):
        with self._lock:
            self._granted.add(permission)

    def revoke(self, permission):
        with self._lock:
            self._granted.discard(permission)

    def request(self, permissions):
        """
        Ask for each permission not granted yet

        Returns:
            dict: permission -> granted flag
        """
        results = {}
        for permission in permissions:
            if self.is_granted(permission):
                results[permission] = True
                continue
            allowed = bool(self.requester(permission))
            if allowed:
                self.grant(permission)
            else:
                message = f"{permission} permission denied"
                logger.warning(message)
                if self.on_denied is not None:
                    self.on_denied(message)
            results[permission] = allowed
        return results

    def request_storage_permissions(self):
        return self.request(STORAGE_PERMISSIONS)

    def require(self, permission):
        """Raise PermissionDenied unless the permission is granted"""
        if not self.is_granted(permission):
            raise PermissionDenied(permission)

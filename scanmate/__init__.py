"""
ScanMate - scan documents into pages and save them as a named PDF
"""

__version__ = "1.0.0"

from .app import Notice, ScanMateApp
from .capture import CaptureCoordinator
from .config import ScanMateConfig
from .engine import CaptureResult, GalleryScanEngine, ResultCode, ScanEngine, ScannerOptions
from .errors import (
    EngineUnavailable,
    ExportFailed,
    ExportInProgress,
    NothingToExport,
    PermissionDenied,
    ScanMateError,
    ValidationError
)
from .export import ExportManager
from .permissions import Permission, PermissionManager
from .session import Session
from .storage import ContentResolver, StorageLocations

__all__ = [
    'CaptureCoordinator',
    'CaptureResult',
    'ContentResolver',
    'EngineUnavailable',
    'ExportFailed',
    'ExportInProgress',
    'ExportManager',
    'GalleryScanEngine',
    'Notice',
    'NothingToExport',
    'Permission',
    'PermissionDenied',
    'PermissionManager',
    'ResultCode',
    'ScanEngine',
    'ScanMateApp',
    'ScanMateConfig',
    'ScanMateError',
    'ScannerOptions',
    'Session',
    'StorageLocations',
    'ValidationError'
]

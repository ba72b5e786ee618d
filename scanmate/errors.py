"""
Exception types raised by the scan and export workflow
"""


class ScanMateError(Exception):
    """Base class for every error the workflow reports to the screen"""


class ValidationError(ScanMateError):
    """The output name is missing or unusable"""


class EngineUnavailable(ScanMateError):
    """The scanning engine could not be started or crashed mid-scan"""


class ExportFailed(ScanMateError):
    """An I/O error happened while writing the output document"""

    def __init__(self, reason):
        super().__init__(reason)
        self.reason = str(reason)


class ExportInProgress(ExportFailed):
    """Another export of the same session has not finished yet"""

    def __init__(self):
        super().__init__("An export is already in progress")


class NothingToExport(ScanMateError):
    """The session holds no pages and the empty-export policy is 'reject'"""


class PermissionDenied(ScanMateError):
    """A storage or media permission has not been granted"""

    def __init__(self, permission):
        super().__init__(f"{permission} permission denied")
        self.permission = permission

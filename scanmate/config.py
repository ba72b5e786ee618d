"""
Configuration for the ScanMate workflow

Defaults mirror the behaviour of the phone application: full scanner mode,
gallery import allowed, five pages at most, JPEG pages plus a combined PDF.
"""

import os

# Scanner capability profile
DEFAULT_SCANNER_MODE = "full"
DEFAULT_PAGE_LIMIT = 5
DEFAULT_GALLERY_IMPORT = True
DEFAULT_RESULT_FORMATS = ("image", "combined-document")

# Output
OUTPUT_EXTENSION = ".pdf"
EXPORT_STRATEGIES = ("concatenate", "combined")
EMPTY_EXPORT_POLICIES = ("allow", "reject")

# Page rendering
JPEG_QUALITY = 90
PDF_DPI = 200
PREVIEW_WIDTH = 360

APP_TITLE = "ScanMate: Document Scanner"
ENV_PREFIX = "SCANMATE_"


def _default_home():
    return os.path.join(os.path.expanduser("~"), ".scanmate")


class ScanMateConfig:
    """Settings shared by the engine, the coordinator and the export manager"""

    def __init__(self, documents_dir=None, files_dir=None, cache_dir=None,
                 scanner_mode=DEFAULT_SCANNER_MODE, page_limit=DEFAULT_PAGE_LIMIT,
                 gallery_import_allowed=DEFAULT_GALLERY_IMPORT,
                 result_formats=DEFAULT_RESULT_FORMATS,
                 export_strategy="concatenate", empty_export_policy="allow",
                 enhancement_mode="auto"):
        """
        Args:
            documents_dir (str): Public, user-visible documents directory
            files_dir (str): App-private files directory
            cache_dir (str): Directory the engine writes scanned pages into
            scanner_mode (str): "base" or "full"
            page_limit (int): Maximum number of pages per scan
            gallery_import_allowed (bool): Whether gallery images may be imported
            result_formats (iterable): Subset of {"image", "combined-document"}
            export_strategy (str): "concatenate" or "combined"
            empty_export_policy (str): "allow" or "reject"
            enhancement_mode (str): Enhancement applied in full scanner mode
        """
        home = _default_home()
        self.documents_dir = documents_dir or os.path.join(os.path.expanduser("~"), "Documents")
        self.files_dir = files_dir or os.path.join(home, "files")
        self.cache_dir = cache_dir or os.path.join(home, "cache")
        self.scanner_mode = scanner_mode
        self.page_limit = int(page_limit)
        self.gallery_import_allowed = bool(gallery_import_allowed)
        self.result_formats = frozenset(result_formats)
        self.export_strategy = export_strategy
        self.empty_export_policy = empty_export_policy
        self.enhancement_mode = enhancement_mode
        self.validate()

    def validate(self):
        if self.scanner_mode not in ("base", "full"):
            raise ValueError(f"Unknown scanner mode: {self.scanner_mode}")
        if self.page_limit < 1:
            raise ValueError("page_limit must be at least 1")
        unknown = self.result_formats - set(DEFAULT_RESULT_FORMATS)
        if unknown:
            raise ValueError(f"Unknown result formats: {sorted(unknown)}")
        if self.export_strategy not in EXPORT_STRATEGIES:
            raise ValueError(f"Unknown export strategy: {self.export_strategy}")
        if self.empty_export_policy not in EMPTY_EXPORT_POLICIES:
            raise ValueError(f"Unknown empty export policy: {self.empty_export_policy}")

    @classmethod
    def from_env(cls, environ=None, **overrides):
        """Build a config from SCANMATE_* environment variables plus explicit overrides"""
        environ = os.environ if environ is None else environ
        values = {}
        for key in ("documents_dir", "files_dir", "cache_dir", "scanner_mode",
                    "export_strategy", "empty_export_policy", "enhancement_mode"):
            env_value = environ.get(ENV_PREFIX + key.upper())
            if env_value:
                values[key] = env_value
        page_limit = environ.get(ENV_PREFIX + "PAGE_LIMIT")
        if page_limit:
            values["page_limit"] = int(page_limit)
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def __repr__(self):
        return (f"ScanMateConfig(documents_dir={self.documents_dir!r}, "
                f"files_dir={self.files_dir!r}, scanner_mode={self.scanner_mode!r}, "
                f"page_limit={self.page_limit})")

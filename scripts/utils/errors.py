"""
Exception classes shared by the build scripts.

These are caught at the record or file boundary, logged and the run moves on;
missing configuration is handled in scripts.utils.env by exiting the process.
"""


class SiteScriptsError(Exception):
    """Base exception for all build script errors."""
    pass


class DownloadError(SiteScriptsError):
    """Raised when an image cannot be downloaded."""
    pass


class NotionError(SiteScriptsError):
    """Raised when the Notion API returns an error or cannot be reached."""
    pass


class ImageProcessingError(SiteScriptsError):
    """Raised when an image cannot be decoded, resized or encoded."""
    pass

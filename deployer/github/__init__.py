"""GitHub REST access: HTTP client and release calls."""

from .http import HttpClient, HttpError, MockHttpClient, RealHttpClient
from .releases import ReleaseRequest, ReleaseResponse, create_release, upload_asset

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    "ReleaseRequest",
    "ReleaseResponse",
    "create_release",
    "upload_asset",
]

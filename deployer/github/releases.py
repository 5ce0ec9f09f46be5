"""GitHub Releases REST calls.

Two requests make up a publish:

- ``POST {api}/repos/{org}/{repo}/releases`` creates the release and answers
  with an RFC 6570 ``upload_url`` template
- ``POST {upload_url}?name={file}`` attaches one asset

All functions take an HttpClient parameter for testability.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from deployer.core.result import Err, Ok, Result
from deployer.core.structured import get_int, get_str
from deployer.github.http import HttpError

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from deployer.github.http import HttpClient, ProgressCallback

__all__ = [
    "DEFAULT_API_URL",
    "ReleaseRequest",
    "ReleaseResponse",
    "api_headers",
    "releases_endpoint",
    "upload_endpoint",
    "create_release",
    "upload_asset",
]

DEFAULT_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"


@dataclass(frozen=True, slots=True)
class ReleaseRequest:
    """Body of the create-release call.

    Attributes:
        tag: Tag name the release points at (created if missing)
        title: Release name
        draft: Create as an unpublished draft
        prerelease: Mark as a pre-release
        description: Release notes (``body``), omitted when None
        target_commitish: Branch or commit for a new tag, omitted when None
    """

    tag: str
    title: str
    draft: bool = False
    prerelease: bool = False
    description: str | None = None
    target_commitish: str | None = None

    def to_payload(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "tag_name": self.tag,
            "name": self.title,
            "draft": self.draft,
            "prerelease": self.prerelease,
        }
        if self.description is not None:
            payload["body"] = self.description
        if self.target_commitish is not None:
            payload["target_commitish"] = self.target_commitish
        return payload


@dataclass(frozen=True, slots=True)
class ReleaseResponse:
    """The part of the create-release response the upload step needs."""

    upload_url_template: str
    html_url: str | None = None
    id: int | None = None

    @property
    def upload_url(self) -> str:
        """Literal asset endpoint: the template cut at its first ``{``."""
        return self.upload_url_template.split("{", 1)[0]

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> ReleaseResponse | None:
        template = get_str(data, "upload_url")
        if template is None:
            return None
        return cls(
            upload_url_template=template,
            html_url=get_str(data, "html_url"),
            id=get_int(data, "id"),
        )


def api_headers(token: str) -> dict[str, str]:
    """Headers shared by every call: bearer auth and the REST media type."""
    return {
        "Authorization": f"Bearer {token}",
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": GITHUB_API_VERSION,
    }


def releases_endpoint(api_url: str, org: str, repo: str) -> str:
    return f"{api_url.rstrip('/')}/repos/{quote(org, safe='')}/{quote(repo, safe='')}/releases"


def upload_endpoint(upload_url: str, filename: str) -> str:
    return f"{upload_url}?name={quote(filename, safe='')}"


def create_release(
    http: HttpClient,
    *,
    api_url: str,
    org: str,
    repo: str,
    token: str,
    request: ReleaseRequest,
) -> Result[ReleaseResponse, HttpError]:
    """Create a release.

    Returns:
        Ok with the parsed response, or Err with the HttpError (its ``body``
        holds the API's explanation, e.g. ``{"message":"Validation Failed"}``)
    """
    url = releases_endpoint(api_url, org, repo)
    result = http.post_json(url, request.to_payload(), headers=api_headers(token))
    if isinstance(result, Err):
        return result

    response = ReleaseResponse.from_json(result.value)
    if response is None:
        return Err(HttpError(url=url, status=0, message="Missing upload_url in response"))
    return Ok(response)


def upload_asset(
    http: HttpClient,
    *,
    upload_url: str,
    token: str,
    path: Path,
    content_type: str,
    progress: ProgressCallback | None = None,
) -> Result[None, HttpError]:
    """Attach ``path`` to the release behind ``upload_url``, named after the file."""
    headers = {**api_headers(token), "Content-Type": content_type}
    return http.upload(
        upload_endpoint(upload_url, path.name),
        path,
        headers=headers,
        progress=progress,
    )

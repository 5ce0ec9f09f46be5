"""Create a GitHub release and upload the build artifacts to it.

The run is strictly sequential: one create call, then one upload per
artifact, each finishing before the next starts. The first failure stops the
run; nothing is retried and earlier uploads are left in place.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from deployer.core.errors import (
    ArtifactError,
    DeployError,
    ErrorCode,
    ReleaseCreationError,
    UploadError,
)
from deployer.core.result import Err
from deployer.github.releases import (
    DEFAULT_API_URL,
    ReleaseRequest,
    ReleaseResponse,
    create_release,
    releases_endpoint,
    upload_asset,
)
from deployer.output.console import Style
from deployer.services.progress import PercentProgress

if TYPE_CHECKING:
    from deployer.core.config import ResolvedConfig
    from deployer.github.http import HttpClient, HttpError
    from deployer.output.console import ConsoleProtocol

__all__ = [
    "DEFAULT_EXTENSION",
    "DEFAULT_CONTENT_TYPE",
    "Artifact",
    "PublishSettings",
    "ReleasePublisher",
    "collect_artifacts",
    "run",
]

DEFAULT_EXTENSION = "jar"
DEFAULT_CONTENT_TYPE = "application/java-archive"


@dataclass(frozen=True, slots=True)
class PublishSettings:
    """Everything a publish run reads from the resolved configuration."""

    org: str
    repo: str
    token: str
    tag: str
    title: str
    artifact_dir: Path
    description: str | None = None
    draft: bool = False
    prerelease: bool = False
    target_commitish: str | None = None
    extension: str = DEFAULT_EXTENSION
    content_type: str = DEFAULT_CONTENT_TYPE
    api_url: str = DEFAULT_API_URL

    @classmethod
    def from_config(cls, config: ResolvedConfig) -> PublishSettings:
        """Read required and optional keys.

        Raises:
            MissingConfigError: If a required key is absent.
        """
        return cls(
            repo=config.require(config.get_string, "repo"),
            org=config.require(config.get_string, "org"),
            token=config.require(config.get_string, "token"),
            tag=config.require(config.get_string, "tag"),
            title=config.require(config.get_string, "title"),
            artifact_dir=config.require(config.get_path, "artifact"),
            description=config.get_string("desc"),
            draft=config.get_or(config.get_bool, "draft", False),
            prerelease=config.get_or(config.get_bool, "prerelease", False),
            target_commitish=config.get_string("target_commitish"),
            extension=config.get_or(config.get_string, "extension", DEFAULT_EXTENSION).lstrip("."),
            content_type=config.get_or(config.get_string, "content_type", DEFAULT_CONTENT_TYPE),
            api_url=config.get_or(config.get_string, "api_url", DEFAULT_API_URL),
        )

    def release_request(self) -> ReleaseRequest:
        return ReleaseRequest(
            tag=self.tag,
            title=self.title,
            draft=self.draft,
            prerelease=self.prerelease,
            description=self.description,
            target_commitish=self.target_commitish,
        )


@dataclass(frozen=True, slots=True)
class Artifact:
    """A file to attach to the release."""

    path: Path
    size: int

    @property
    def name(self) -> str:
        return self.path.name


def _extension_of(path: Path) -> str:
    _, dot, ext = path.name.rpartition(".")
    return ext if dot else ""


def collect_artifacts(directory: Path, extension: str) -> list[Artifact]:
    """List regular files in ``directory`` (not recursive) with the given extension.

    Sorted by file name so runs are repeatable.

    Raises:
        ArtifactError: If the directory is missing or cannot be listed.
    """
    if not directory.is_dir():
        raise ArtifactError(f"Artifact directory not found: {directory}")

    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
        return [
            Artifact(path=entry, size=entry.stat().st_size)
            for entry in entries
            if entry.is_file() and _extension_of(entry) == extension
        ]
    except OSError as e:
        raise ArtifactError(f"Cannot list artifact directory {directory}: {e}") from e


def _describe(error: HttpError) -> str:
    return error.body or str(error)


class ReleasePublisher:
    """Runs one publish: create the release, then upload each artifact.

    Usage:
        publisher = ReleasePublisher(settings, http=RealHttpClient(), console=RichConsole())
        publisher.publish()
    """

    def __init__(
        self,
        settings: PublishSettings,
        *,
        http: HttpClient,
        console: ConsoleProtocol,
    ) -> None:
        self._settings = settings
        self._http = http
        self._console = console

    def create(self) -> ReleaseResponse:
        """Create the release.

        Raises:
            ReleaseCreationError: On any non-2xx status or unusable response body.
        """
        s = self._settings
        self._console.header("Creating release")
        self._console.print(f"POST {releases_endpoint(s.api_url, s.org, s.repo)}", Style.DIM)

        result = create_release(
            self._http,
            api_url=s.api_url,
            org=s.org,
            repo=s.repo,
            token=s.token,
            request=s.release_request(),
        )
        if isinstance(result, Err):
            error = result.error
            raise ReleaseCreationError(
                "Release Creation failed!", status=error.status, body=_describe(error)
            )

        response = result.value
        if response.html_url:
            self._console.print(f"Release page: {response.html_url}", Style.DIM)
        return response

    def upload(self, upload_url: str, artifact: Artifact) -> None:
        """Stream one artifact, printing percent progress.

        Raises:
            UploadError: On a transport failure or non-2xx status.
        """
        self._console.print(f"Uploading {artifact.path}")
        result = upload_asset(
            self._http,
            upload_url=upload_url,
            token=self._settings.token,
            path=artifact.path,
            content_type=self._settings.content_type,
            progress=PercentProgress(self._console),
        )
        if isinstance(result, Err):
            raise UploadError(artifact.name, _describe(result.error))

    def publish(self) -> list[Artifact]:
        """Create the release and upload every matching artifact.

        Returns:
            The artifacts that were uploaded, in upload order.

        Raises:
            DeployError: On the first fatal failure.
        """
        response = self.create()
        upload_url = response.upload_url
        self._console.print(f"Upload URL: {upload_url}", Style.DIM)

        self._console.header("Uploading artifacts")
        artifacts = collect_artifacts(self._settings.artifact_dir, self._settings.extension)
        if not artifacts:
            self._console.warning(
                f"No *.{self._settings.extension} files in {self._settings.artifact_dir}"
            )

        for artifact in artifacts:
            self.upload(upload_url, artifact)
        return artifacts


def run(config: ResolvedConfig, *, http: HttpClient, console: ConsoleProtocol) -> ErrorCode:
    """Publish using ``config``; report the first fatal error and return its exit code."""
    console.print(f"Configuration: {config.as_dict(redact=('token',))}", Style.DIM)
    try:
        settings = PublishSettings.from_config(config)
        ReleasePublisher(settings, http=http, console=console).publish()
    except DeployError as e:
        console.error(e.message)
        return e.code
    return ErrorCode.OK

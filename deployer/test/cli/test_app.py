from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

import deployer.cli.app as cli_app
from deployer import __version__
from deployer.github.http import HttpError, MockHttpClient

RELEASES_URL = "https://api.github.com/repos/acme/tool/releases"
UPLOAD_URL = "https://uploads.example.com/releases/1/assets"

runner = CliRunner()


@pytest.fixture
def http(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> MockHttpClient:
    client = MockHttpClient()
    client.set_json(RELEASES_URL, {"upload_url": f"{UPLOAD_URL}{{?name,label}}"})
    client.set_upload(UPLOAD_URL)
    monkeypatch.setattr(cli_app, "RealHttpClient", lambda: client)
    monkeypatch.chdir(tmp_path)
    for name in ("githubdeployer.tag", "GITHUBDEPLOYER_TAG", "GITHUBDEPLOYER_TOKEN"):
        monkeypatch.delenv(name, raising=False)
    return client


def _artifacts(tmp_path: Path) -> Path:
    out = tmp_path / "libs"
    out.mkdir()
    (out / "tool.jar").write_bytes(b"x" * 1000)
    return out


def _args(artifact_dir: Path) -> list[str]:
    return [
        "org=acme",
        "repo=tool",
        "token=secret",
        "tag=v1.0",
        "title=Tool 1.0",
        f"artifact={artifact_dir}",
    ]


def test_version() -> None:
    result = runner.invoke(cli_app.app, ["--version"])
    assert result.exit_code == 0
    assert result.output.strip() == __version__


def test_publish_success(tmp_path: Path, http: MockHttpClient) -> None:
    result = runner.invoke(cli_app.app, [*_args(_artifacts(tmp_path)), "draft"])

    assert result.exit_code == 0, result.output
    assert "Creating release" in result.output
    assert "Upload: 100%" in result.output
    assert http.requests[0].payload == {
        "tag_name": "v1.0",
        "name": "Tool 1.0",
        "draft": True,
        "prerelease": False,
    }
    assert http.calls[1] == ("upload", f"{UPLOAD_URL}?name=tool.jar")


def test_missing_required_key(tmp_path: Path, http: MockHttpClient) -> None:
    result = runner.invoke(cli_app.app, ["org=acme"])

    assert result.exit_code == 1
    assert "Missing argument repo" in result.output
    assert http.calls == []


def test_environment_override_wins(tmp_path: Path, http: MockHttpClient) -> None:
    result = runner.invoke(
        cli_app.app,
        _args(_artifacts(tmp_path)),
        env={"githubdeployer.tag": "v9.9"},
    )

    assert result.exit_code == 0, result.output
    assert http.requests[0].payload is not None
    assert http.requests[0].payload["tag_name"] == "v9.9"


def test_config_file_in_working_directory(tmp_path: Path, http: MockHttpClient) -> None:
    artifact_dir = _artifacts(tmp_path)
    (tmp_path / "config.properties").write_text(
        f"org=acme\nrepo=tool\ntoken=secret\ntitle=From file\nartifact={artifact_dir}\n",
        encoding="utf-8",
    )

    result = runner.invoke(cli_app.app, ["tag=v2.0", "desc=Release notes"])

    assert result.exit_code == 0, result.output
    assert http.requests[0].payload == {
        "tag_name": "v2.0",
        "name": "From file",
        "draft": False,
        "prerelease": False,
        "body": "Release notes",
    }


def test_release_creation_failure(tmp_path: Path, http: MockHttpClient) -> None:
    http.set_json(
        RELEASES_URL,
        HttpError(
            url=RELEASES_URL,
            status=422,
            message="Unprocessable Entity",
            body='{"message":"Validation Failed"}',
        ),
    )

    result = runner.invoke(cli_app.app, _args(_artifacts(tmp_path)))

    assert result.exit_code == 4
    assert "Validation Failed" in result.output
    assert [method for method, _ in http.calls] == ["post_json"]


def test_missing_artifact_directory(tmp_path: Path, http: MockHttpClient) -> None:
    result = runner.invoke(cli_app.app, _args(tmp_path / "missing"))
    assert result.exit_code == 5

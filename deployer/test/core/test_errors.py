"""Tests for deployer.core.errors module."""

from deployer.core.errors import (
    ArtifactError,
    DeployError,
    ErrorCode,
    MissingConfigError,
    ReleaseCreationError,
    UploadError,
)


class TestErrorCode:
    def test_values_are_stable(self) -> None:
        """Exit codes are part of the CLI contract."""
        assert ErrorCode.OK == 0
        assert ErrorCode.USER_ERROR == 1
        assert ErrorCode.NETWORK_ERROR == 4
        assert ErrorCode.IO_ERROR == 5


class TestDeployErrors:
    def test_missing_config(self) -> None:
        error = MissingConfigError("token", "string")
        assert isinstance(error, DeployError)
        assert error.message == "Missing argument token of type string"
        assert error.code == ErrorCode.USER_ERROR

    def test_release_creation_includes_body(self) -> None:
        error = ReleaseCreationError(
            "Release Creation failed!", status=422, body='{"message":"Validation Failed"}'
        )
        assert "Validation Failed" in str(error)
        assert error.status == 422
        assert error.code == ErrorCode.NETWORK_ERROR

    def test_release_creation_without_body(self) -> None:
        assert ReleaseCreationError("failed").message == "failed"

    def test_upload(self) -> None:
        error = UploadError("app.jar", "HTTP 500")
        assert error.message == "Upload of app.jar failed: HTTP 500"
        assert error.code == ErrorCode.NETWORK_ERROR

    def test_artifact(self) -> None:
        assert ArtifactError("gone").code == ErrorCode.IO_ERROR

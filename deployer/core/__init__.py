"""Configuration, errors and result types shared by the publisher."""

from .config import ResolvedConfig, load_config, parse_args
from .errors import (
    ArtifactError,
    DeployError,
    ErrorCode,
    MissingConfigError,
    ReleaseCreationError,
    UploadError,
)
from .result import Err, Ok, Result

__all__ = [
    # config
    "ResolvedConfig",
    "load_config",
    "parse_args",
    # errors
    "ArtifactError",
    "DeployError",
    "ErrorCode",
    "MissingConfigError",
    "ReleaseCreationError",
    "UploadError",
    # result
    "Err",
    "Ok",
    "Result",
]

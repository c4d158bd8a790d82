"""
Core functionality for buildbox.
"""

from .config import BuildboxConfig, CacheConfig, ConfigManager, DockerConfig, SandboxConfig
from .exceptions import (
    BuildboxError,
    CacheError,
    ConfigurationError,
    ContainerAlreadyExistsError,
    ContainerNotFoundError,
    EngineUnavailableError,
    ExecutionError,
    ImagePullError,
    InfrastructureError,
    PreconditionError,
    ProjectFileMissingError,
    format_error_message,
)
from .logging import get_logger, setup_logging

__all__ = [
    "BuildboxConfig",
    "BuildboxError",
    "CacheConfig",
    "CacheError",
    "ConfigManager",
    "ConfigurationError",
    "ContainerAlreadyExistsError",
    "ContainerNotFoundError",
    "DockerConfig",
    "EngineUnavailableError",
    "ExecutionError",
    "ImagePullError",
    "InfrastructureError",
    "PreconditionError",
    "ProjectFileMissingError",
    "SandboxConfig",
    "format_error_message",
    "get_logger",
    "setup_logging",
]

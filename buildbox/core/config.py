"""
Configuration management for buildbox.
"""

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigurationError

IMAGE_MATCH_MODES = ("exact", "substring")
ENVIRONMENTS = ("container", "host")


@dataclass
class DockerConfig:
    """Docker engine and container settings."""

    base_url: str | None = None  # None -> DOCKER_HOST or the local socket
    container_prefix: str = "buildbox"
    container_workdir: str = "/app"
    image_match: str = "exact"  # exact | substring
    shell: str = "/bin/sh"
    images: dict[str, str] = field(default_factory=dict)  # language tag -> image override


@dataclass
class CacheConfig:
    """Configuration for the build result cache."""

    enabled: bool = True
    path: str = ".buildbox/build_cache.json"


@dataclass
class SandboxConfig:
    """Sandbox directory and execution target."""

    sandbox_dir: str = "sandbox"
    environment: str = "container"  # container | host
    ensure_ready: bool = True  # pull/create/start the container on cache miss


@dataclass
class BuildboxConfig:
    """Main buildbox configuration."""

    name: str = "buildbox"
    verbose: bool = False
    docker: DockerConfig = field(default_factory=DockerConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    sandbox: SandboxConfig = field(default_factory=SandboxConfig)

    def __post_init__(self) -> None:
        if self.docker.image_match not in IMAGE_MATCH_MODES:
            raise ConfigurationError(
                f"Unsupported image_match '{self.docker.image_match}'. "
                f"Supported: {', '.join(IMAGE_MATCH_MODES)}"
            )
        if self.sandbox.environment not in ENVIRONMENTS:
            raise ConfigurationError(
                f"Unsupported environment '{self.sandbox.environment}'. "
                f"Supported: {', '.join(ENVIRONMENTS)}"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "BuildboxConfig":
        """Build a configuration from plain (YAML/JSON) data."""
        data = dict(data or {})

        docker_data = data.get("docker") or {}
        cache_data = data.get("cache") or {}
        sandbox_data = data.get("sandbox") or {}
        for section, value in (
            ("docker", docker_data),
            ("cache", cache_data),
            ("sandbox", sandbox_data),
        ):
            if not isinstance(value, dict):
                raise ConfigurationError(f"Section '{section}' must be a mapping")

        try:
            docker_data = dict(docker_data)
            docker_data["images"] = {
                str(key).strip().lower(): str(value)
                for key, value in (docker_data.get("images") or {}).items()
            }
            return cls(
                name=str(data.get("name") or "buildbox"),
                verbose=bool(data.get("verbose", False)),
                docker=DockerConfig(**docker_data),
                cache=CacheConfig(**cache_data),
                sandbox=SandboxConfig(**sandbox_data),
            )
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    @classmethod
    def load_from_file(cls, config_path: Path) -> "BuildboxConfig":
        """Load configuration from file."""
        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, encoding="utf-8") as f:
                if config_path.suffix.lower() == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

        if data is not None and not isinstance(data, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")

        config = cls.from_dict(data)
        config.apply_env_overrides()
        return config

    def apply_env_overrides(self) -> None:
        """Let environment variables win over file values."""
        verbose = os.getenv("BUILDBOX_VERBOSE")
        if verbose is not None:
            self.verbose = verbose.strip().lower() in {"1", "true", "yes", "on"}

        docker_host = os.getenv("DOCKER_HOST")
        if docker_host and not self.docker.base_url:
            self.docker.base_url = docker_host

    def save_to_file(self, config_path: Path) -> None:
        """Save configuration to file."""
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            data = asdict(self)
            with open(config_path, "w", encoding="utf-8") as f:
                if config_path.suffix.lower() == ".json":
                    json.dump(data, f, indent=2)
                else:
                    yaml.safe_dump(data, f, default_flow_style=False, indent=2)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration: {e}") from e

    @classmethod
    def create_default(cls, project_name: str) -> "BuildboxConfig":
        """Create default configuration for a new project."""
        return cls(name=project_name)


class ConfigManager:
    """Manages project configuration."""

    CONFIG_FILENAME = "buildbox.yaml"

    def __init__(self, project_root: Path | None = None):
        self.project_root = project_root or Path.cwd()
        self.config_path = self.project_root / self.CONFIG_FILENAME
        self._config: BuildboxConfig | None = None

    @property
    def config(self) -> BuildboxConfig:
        """Get current configuration, loading if necessary."""
        if self._config is None:
            self.load_config()
        return self._config

    def load_config(self) -> BuildboxConfig:
        """Load configuration from file, falling back to defaults."""
        if self.config_path.exists():
            self._config = BuildboxConfig.load_from_file(self.config_path)
        else:
            self._config = BuildboxConfig.create_default(self.project_root.name)
            self._config.apply_env_overrides()
        return self._config

    def save_config(self) -> None:
        """Save current configuration to file."""
        if self._config is None:
            raise ConfigurationError("No configuration to save")
        self._config.save_to_file(self.config_path)

    def resolve_path(self, raw: str) -> Path:
        """Resolve a configured path relative to the project root."""
        path = Path(raw).expanduser()
        if not path.is_absolute():
            path = self.project_root / path
        return path.resolve()

    @property
    def sandbox_dir(self) -> Path:
        return self.resolve_path(self.config.sandbox.sandbox_dir)

    @property
    def cache_path(self) -> Path:
        return self.resolve_path(self.config.cache.path)

"""
Custom exceptions for buildbox.

Provides specific exception types for better error handling and user feedback.
"""


class BuildboxError(Exception):
    """Base exception for buildbox errors."""


class ConfigurationError(BuildboxError):
    """Error in configuration."""


class CacheError(BuildboxError):
    """Result cache could not be read or written."""

    def __init__(self, message: str):
        super().__init__(f"Result cache error: {message}")
        self.user_message = "The build result cache is unreadable."
        self.recovery_hint = "Delete the cache file to start with an empty cache."


# Precondition Errors


class PreconditionError(BuildboxError):
    """A required input is missing. Aborts the current call."""


class ProjectFileMissingError(PreconditionError):
    """A generated project file is not present in the sandbox."""

    def __init__(self, path: str):
        super().__init__(f"Project file not found: {path}")
        self.path = path
        self.user_message = f"Expected generated file '{path}' is missing."
        self.recovery_hint = "Materialize the project into the sandbox before building."


class ContainerNotFoundError(PreconditionError):
    """The language container does not exist."""

    def __init__(self, container_name: str):
        super().__init__(
            f"Container {container_name} not found. Create it first with create_container()."
        )
        self.container_name = container_name
        self.user_message = f"Container '{container_name}' does not exist."
        self.recovery_hint = "Create the container before starting or running commands in it."


class ContainerAlreadyExistsError(PreconditionError):
    """A container with the language container name already exists."""

    def __init__(self, container_name: str):
        super().__init__(f"Container {container_name} already exists")
        self.container_name = container_name
        self.user_message = f"Container '{container_name}' already exists."
        self.recovery_hint = "Remove the existing container or start it instead."


# Infrastructure Errors


class InfrastructureError(BuildboxError):
    """The container engine or host could not carry out a request."""


class EngineUnavailableError(InfrastructureError):
    """Docker daemon is unreachable."""

    def __init__(self, details: str):
        super().__init__(f"Couldn't connect to Docker: {details}")
        self.user_message = "The Docker engine is not reachable."
        self.recovery_hint = "Check that the Docker daemon is running (docker info)."


class ImagePullError(InfrastructureError):
    """Image could not be fetched."""

    def __init__(self, image: str, details: str):
        super().__init__(f"Couldn't pull image {image}: {details}")
        self.image = image
        self.user_message = f"Pulling image '{image}' failed."
        self.recovery_hint = "Check the image name and your registry access."


class ContainerOperationError(InfrastructureError):
    """A container lifecycle call was rejected by the engine."""


class ExecutionError(InfrastructureError):
    """Base exception for command execution errors."""


class ExecCreationError(ExecutionError):
    """Exec instance could not be created in the container."""

    def __init__(self, container_name: str, details: str):
        super().__init__(f"Exec creation error in {container_name}: {details}")
        self.container_name = container_name


class StreamAttachError(ExecutionError):
    """Output stream of an exec could not be attached or drained."""

    def __init__(self, details: str):
        super().__init__(f"Exec start error: {details}")


class CommandNotFoundError(ExecutionError):
    """Executable is not available on the host."""

    def __init__(self, executable: str):
        super().__init__(f"Executable not found on host: {executable}")
        self.executable = executable
        self.user_message = f"'{executable}' is not installed on this machine."
        self.recovery_hint = "Install the toolchain or run the build in the container environment."


class DetachedExecutionError(ExecutionError):
    """Command ran without attached streams so no exit status is known."""

    def __init__(self, command: str):
        super().__init__(f"Command ran detached, no exit status available: {command}")


def format_error_message(error: Exception) -> str:
    """
    Format an error message for display to user.

    Args:
        error: Exception to format

    Returns:
        Formatted error message with recovery hints
    """
    if isinstance(error, BuildboxError) and hasattr(error, "user_message"):
        message = error.user_message
        if hasattr(error, "recovery_hint"):
            message += f"\n\nHint: {error.recovery_hint}"
        return message
    return str(error)

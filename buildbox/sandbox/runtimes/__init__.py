"""
Sandbox runtime backends.
"""

from .base import ExecutionEnvironment, ExecutionRequest, ExecutionResult, SandboxRuntime
from .docker_runtime import DockerSandboxRuntime, check_health, connect_engine
from .local_runtime import LocalSandboxRuntime

__all__ = [
    "DockerSandboxRuntime",
    "ExecutionEnvironment",
    "ExecutionRequest",
    "ExecutionResult",
    "LocalSandboxRuntime",
    "SandboxRuntime",
    "check_health",
    "connect_engine",
]

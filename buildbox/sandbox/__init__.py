"""
Sandboxed command execution: container lifecycle, runtimes and dispatch.
"""

from .containers import ContainerLifecycleManager, container_name, current_user
from .dispatcher import ExecutionDispatcher, split_command
from .runtimes import (
    DockerSandboxRuntime,
    ExecutionEnvironment,
    ExecutionRequest,
    ExecutionResult,
    LocalSandboxRuntime,
    SandboxRuntime,
    connect_engine,
)

__all__ = [
    "ContainerLifecycleManager",
    "DockerSandboxRuntime",
    "ExecutionDispatcher",
    "ExecutionEnvironment",
    "ExecutionRequest",
    "ExecutionResult",
    "LocalSandboxRuntime",
    "SandboxRuntime",
    "connect_engine",
    "container_name",
    "current_user",
    "split_command",
]

"""
buildbox - sandboxed build/test execution for generated projects.
"""

from .core.config import BuildboxConfig, ConfigManager
from .execution import BuildOrchestrator, BuildOutcome, ResultCache
from .project import Language, Project, get_descriptor, write_project
from .sandbox import ContainerLifecycleManager, ExecutionDispatcher, ExecutionEnvironment

__version__ = "0.1.0"

__all__ = [
    "BuildOrchestrator",
    "BuildOutcome",
    "BuildboxConfig",
    "ConfigManager",
    "ContainerLifecycleManager",
    "ExecutionDispatcher",
    "ExecutionEnvironment",
    "Language",
    "Project",
    "ResultCache",
    "__version__",
    "get_descriptor",
    "write_project",
]

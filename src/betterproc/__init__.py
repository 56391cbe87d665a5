from .model import CommandDefinition
from .procfile import ProcessList
from .process import CommandRunner, expand
from .errors import BetterProcError, ExecutionError, PathResolutionError

__all__ = [
    "CommandDefinition",
    "ProcessList",
    "CommandRunner",
    "expand",
    "BetterProcError",
    "ExecutionError",
    "PathResolutionError",
]

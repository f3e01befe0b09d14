"""Universal resource installer for AI coding agents."""

__version__ = "0.1.0"

# Export protocol interfaces for type hints and dependency injection
from ai_toolkit.protocols import (
    AgentPathResolver,
    DuplicatePrompt,
    FileSystem,
    ResourceInstaller,
)

__all__ = [
    "__version__",
    "AgentPathResolver",
    "DuplicatePrompt",
    "FileSystem",
    "ResourceInstaller",
]

"""
annodoc: generate help files from annotation comments.

Annotation lines of source files are parsed into a tree of sections,
blocks and files, transformed in place by configurable hooks, and
written out as a single help file.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .config import AnnodocConfig, Config, HooksConfig
from .exceptions import (
    AnnodocError,
    ConfigurationError,
    DestinationWriteError,
    EvaluationError,
    GenerationInProgressError,
    SourceReadError,
)
from .generator import DocGenerator
from .structure import Node, NodeKind
from .transformers import DEFAULT_HOOKS, afterlines_to_code

__all__ = [
    "AnnodocConfig",
    "AnnodocError",
    "Config",
    "ConfigurationError",
    "DEFAULT_HOOKS",
    "DestinationWriteError",
    "DocGenerator",
    "EvaluationError",
    "GenerationInProgressError",
    "HooksConfig",
    "Node",
    "NodeKind",
    "SourceReadError",
    "afterlines_to_code",
]

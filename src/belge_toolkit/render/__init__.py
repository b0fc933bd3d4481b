"""
Render Package

Template rendering engine: validates a template against its mappings,
resolves values from a business record, lays out variable-height
content and draws the pages.

Main entry points:
    - RenderPipeline: Configured, reusable pipeline
    - render(): One-off render with default configuration
"""

from .config import EngineConfig
from .controller import CancellationToken, RenderPipeline, render
from .errors import (
    ConfigurationError,
    InvalidPathError,
    MissingFieldsError,
    OverflowWarning,
    RenderCancelledError,
    RenderError,
    RenderTypeError,
    UnknownTransformError,
    UnsupportedFieldKindError,
    ValidationError,
)
from .registry import TemplateNotFoundError, TemplateRegistry, TemplateStore
from .result import RenderResult, RenderStage

__all__ = [
    "EngineConfig",
    "CancellationToken",
    "RenderPipeline",
    "render",
    "ConfigurationError",
    "InvalidPathError",
    "MissingFieldsError",
    "OverflowWarning",
    "RenderCancelledError",
    "RenderError",
    "RenderTypeError",
    "UnknownTransformError",
    "UnsupportedFieldKindError",
    "ValidationError",
    "TemplateNotFoundError",
    "TemplateRegistry",
    "TemplateStore",
    "RenderResult",
    "RenderStage",
]

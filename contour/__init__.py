"""Contour - typed projection of CMS content nodes.

This module provides the public API for projecting loosely-typed content
nodes onto strongly-typed Python objects.
"""

from .config import ProjectionSettings
from .container import DependencyContainer
from .content import ContentNode, InMemoryContentNode
from .context import clear_culture, culture_scope, get_culture, set_culture
from .exceptions import (
    ConfigurationError,
    ConversionFailure,
    InstanceCreationError,
    ProjectionError,
    ResolutionFailure,
)
from .hints import ConvertWith, Ignore, Lazy, ResolveWith
from .hooks import ConvertedEvent, ConvertingEvent, Decision, ProjectionHooks, hooks
from .lazy import is_lazy_resolved, projected_type
from .projector import Projector, project, project_many
from .resolution import (
    CallableResolver,
    ContentPropertyResolver,
    MarkupConverter,
    ResolutionContext,
    TypeConverter,
    ValueResolver,
)

__all__ = [
    # Projection
    "Projector",
    "project",
    "project_many",
    "ProjectionSettings",
    "DependencyContainer",
    # Content
    "ContentNode",
    "InMemoryContentNode",
    # Culture
    "clear_culture",
    "culture_scope",
    "get_culture",
    "set_culture",
    # Hints
    "ConvertWith",
    "Ignore",
    "Lazy",
    "ResolveWith",
    # Hooks
    "ConvertedEvent",
    "ConvertingEvent",
    "Decision",
    "ProjectionHooks",
    "hooks",
    # Resolution
    "CallableResolver",
    "ContentPropertyResolver",
    "MarkupConverter",
    "ResolutionContext",
    "TypeConverter",
    "ValueResolver",
    # Lazy properties
    "is_lazy_resolved",
    "projected_type",
    # Errors
    "ConfigurationError",
    "ConversionFailure",
    "InstanceCreationError",
    "ProjectionError",
    "ResolutionFailure",
]

"""
Element composition system.

Provides the attribute-bag Element, the priority-ordered View composite,
a factory that builds both from config mappings, and a registry that loads
those configs from YAML files and hot-reloads them without restart.
"""

from .protocols import Composable, Preparable, PrepareRole
from .element import Element, PreparableElement, as_mapping
from .view import ElementCollection, View
from .factory import ElementFactory
from .registry import ElementRegistry

__all__ = [
    "Composable",
    "Element",
    "ElementCollection",
    "ElementFactory",
    "ElementRegistry",
    "Preparable",
    "PreparableElement",
    "PrepareRole",
    "View",
    "as_mapping",
]

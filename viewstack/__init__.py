"""
viewstack - view/element composition.

Build views out of named, priority-ordered elements, prepare them once,
clone them for reuse and render them to markup.
"""

from .core import (
    DomainError,
    InvalidArgumentError,
    InvalidElementError,
    PriorityQueue,
    ViewStackConfig,
    ViewStackError,
)
from .elements import (
    Element,
    ElementFactory,
    ElementRegistry,
    PreparableElement,
    PrepareRole,
    View,
)
from .render import MarkupHelper, render_view

__version__ = "0.1.0"

__all__ = [
    "DomainError",
    "Element",
    "ElementFactory",
    "ElementRegistry",
    "InvalidArgumentError",
    "InvalidElementError",
    "MarkupHelper",
    "PreparableElement",
    "PrepareRole",
    "PriorityQueue",
    "View",
    "ViewStackConfig",
    "ViewStackError",
    "render_view",
]

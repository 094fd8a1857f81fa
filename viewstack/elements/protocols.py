"""
Prepare roles and capability protocols for elements.

Every element class declares exactly one PrepareRole. Views dispatch on the
role during prepare() instead of probing for methods:

- COMPOSABLE: owns children and has a full, idempotent prepare()
- PREPARABLE: leaf with a single-step prepare_element(owner) hook
- NONE: plain element, skipped by prepare()
"""

from __future__ import annotations

from enum import Enum, auto
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .view import View


class PrepareRole(Enum):
    """How a parent view prepares a child."""

    NONE = auto()
    PREPARABLE = auto()
    COMPOSABLE = auto()


class Preparable(Protocol):
    """Leaf element prepared by its owning view in a single step."""

    def prepare_element(self, owner: View) -> None:
        """Apply owner-specific setup to this element."""
        ...


class Composable(Protocol):
    """Element owning children that are prepared recursively."""

    def prepare(self) -> "Composable":
        """Prepare this element and its children once."""
        ...

    def prepare_element(self, owner: View) -> None:
        """Forward owner-specific setup to prepare-aware children."""
        ...

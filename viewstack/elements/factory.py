"""
Element factory - builds elements and views from plain config mappings.

A config looks like:

    name: profile
    type: view
    title: Profile
    attributes: {id: profile}
    elements:
      - {name: email, label: E-mail}
      - spec: {name: password, label: Password, options: {isPassword: true}}
        flags: {priority: 10}
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

from ..core.exceptions import InvalidArgumentError, InvalidElementError
from .element import Element
from .view import View

logger = logging.getLogger(__name__)

DEFAULT_TYPES: dict[str, type[Element]] = {
    "element": Element,
    "view": View,
}


class ElementFactory:
    """
    Creates Element instances from config mappings.

    The class is picked from the config's "type" when that type is
    registered; otherwise a config with an "elements" list becomes a View
    and anything else a plain Element.
    """

    def __init__(self, types: Optional[Mapping[str, type[Element]]] = None):
        self._types: dict[str, type[Element]] = dict(DEFAULT_TYPES)
        for type_name, cls in (types or {}).items():
            self.register(type_name, cls)

    def register(self, type_name: str, cls: type[Element]) -> None:
        """
        Register the class built for a config "type".

        Raises:
            InvalidElementError: If cls is not an Element subclass
        """
        if not isinstance(cls, type) or not issubclass(cls, Element):
            raise InvalidElementError(
                f"Type {type_name!r} must map to an Element subclass; received {cls!r}"
            )
        self._types[type_name] = cls

    def unregister(self, type_name: str) -> None:
        self._types.pop(type_name, None)

    def registered_types(self) -> dict[str, type[Element]]:
        return dict(self._types)

    def resolve(self, spec: Mapping[str, Any]) -> type[Element]:
        """Pick the element class for a config."""
        type_name = spec.get("type")
        if isinstance(type_name, str) and type_name in self._types:
            return self._types[type_name]
        if spec.get("elements") is not None:
            return View
        return Element

    def create(self, spec: Mapping[str, Any]) -> Element:
        """
        Build an element from a config mapping.

        Args:
            spec: Element config (see module docstring)

        Returns:
            A new Element, or a View populated with its "elements"

        Raises:
            InvalidArgumentError: If spec or one of its child entries is malformed
        """
        if not isinstance(spec, Mapping):
            raise InvalidArgumentError(
                f'{type(self).__name__}.create expects a mapping; received "{type(spec).__name__}"'
            )

        cls = self.resolve(spec)
        element = cls()
        element.set_options(spec)
        if spec.get("name") not in (None, ""):
            element.set_name(spec["name"])
        element.init()

        if isinstance(element, View):
            element.set_view_factory(self)
            self._add_children(element, spec.get("elements") or [])

        logger.debug("Created %r from config", element)
        return element

    def _add_children(self, view: View, entries: Any) -> None:
        if isinstance(entries, (str, bytes, Mapping)) or not hasattr(entries, "__iter__"):
            raise InvalidArgumentError(
                f"'elements' of {view!r} must be a list of element configs"
            )
        for entry in entries:
            if isinstance(entry, Mapping) and "spec" in entry:
                view.add(entry["spec"], entry.get("flags"))
            else:
                view.add(entry)

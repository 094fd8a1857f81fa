"""
Markup helpers - turn prepared elements and views into markup strings.

Helpers only read elements (name, attributes, options, label/title/type,
is_password); they never mutate an element or a view's children.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional, Union

import markupsafe

from ..core.config import RenderConfig, get_config
from ..core.exceptions import DomainError, InvalidArgumentError
from ..elements.element import Element
from ..elements.factory import DEFAULT_TYPES, ElementFactory
from ..elements.view import View

logger = logging.getLogger(__name__)


def create_attributes_string(attributes: Mapping[str, Any], escape: bool = True) -> str:
    """
    Build the attribute part of an opening tag.

    True renders as a bare key, False and None are dropped, everything
    else becomes key="value".

    Args:
        attributes: Attribute mapping, rendered in its own order
        escape: Escape keys and values for markup

    Returns:
        Space separated attributes, e.g. 'id="a" disabled'
    """
    esc = markupsafe.escape if escape else str
    parts: list[str] = []
    for key, value in attributes.items():
        if value is None or value is False:
            continue
        if value is True:
            parts.append(str(esc(key)))
        else:
            parts.append(f'{esc(key)}="{esc(value)}"')
    return " ".join(parts)


class MarkupHelper:
    """
    Renders an element as a single tag with text content.

    The tag is the helper's own tag if given, else the element's "type"
    option, else the configured default tag. Types registered on the
    factory name element classes, not tags, and are never used as tags.

    Usage:
        helper = MarkupHelper()
        helper.render(Element("email", {"title": "E-mail"}))
        # '<div name="email" class="div">E-mail</div>'
    """

    def __init__(
        self,
        tag: Optional[str] = None,
        config: Optional[RenderConfig] = None,
        factory: Optional[ElementFactory] = None,
    ):
        self.tag = tag
        self.config = config or get_config().render
        self._class_types = set(factory.registered_types() if factory else DEFAULT_TYPES)

    def __call__(self, element: Optional[Element] = None, label: bool = False):
        """Render an element, or return the helper itself when called bare."""
        if element is None:
            return self
        return self.render(element, label)

    def _markup(self, text: str) -> str:
        return markupsafe.Markup(text) if self.config.escape else text

    def _escape(self, value: Any) -> str:
        if value is None:
            return ""
        return markupsafe.escape(value) if self.config.escape else str(value)

    def tag_for(self, element: Optional[Element] = None) -> str:
        if self.tag:
            return self.tag
        element_type = element.get_type() if element is not None else None
        if element_type and str(element_type) not in self._class_types:
            return str(element_type)
        return self.config.default_tag

    def open_tag(
        self,
        attributes_or_element: Union[Mapping[str, Any], Element, None] = None,
        tag: Optional[str] = None,
    ) -> str:
        """
        Generate an opening tag.

        Raises:
            InvalidArgumentError: If given something other than a mapping or Element
            DomainError: If an element has no name
        """
        if attributes_or_element is None:
            return self._markup(f"<{tag or self.tag_for()}>")

        if isinstance(attributes_or_element, Element):
            element = attributes_or_element
            name = self._require_name(element)
            attributes = element.get_attributes()
            attributes["name"] = name
            tag = tag or self.tag_for(element)
        elif isinstance(attributes_or_element, Mapping):
            attributes = dict(attributes_or_element)
            tag = tag or self.tag_for()
        else:
            raise InvalidArgumentError(
                "open_tag expects a mapping or an Element; "
                f'received "{type(attributes_or_element).__name__}"'
            )

        attribute_string = create_attributes_string(attributes, self.config.escape)
        if not attribute_string:
            return self._markup(f"<{tag}>")
        return self._markup(f"<{tag} {attribute_string}>")

    def close_tag(self, tag: Optional[str] = None) -> str:
        return self._markup(f"</{tag or self.tag_for()}>")

    def render(self, element: Element, label: bool = False) -> str:
        """
        Render an element with its title, or with its label when label=True.

        Password elements render their label masked.

        Raises:
            DomainError: If the element has no name
        """
        self._require_name(element)
        tag = self.tag_for(element)

        attributes = element.get_attributes()
        if label:
            attributes.setdefault("class", "value")
            content = self.config.password_mask if element.is_password() else element.get_label()
        else:
            attributes.setdefault("class", tag)
            content = element.get_title()
        attributes["name"] = element.get_name()

        open_tag = f"<{tag} {create_attributes_string(attributes, self.config.escape)}>"
        return self._markup(f"{open_tag}{self._escape(content)}</{tag}>")

    def render_view(self, view: View, label: bool = False) -> str:
        """
        Render a prepared view and all its descendants in priority order.

        Raises:
            DomainError: If the view has not been prepared
        """
        if not view.is_prepared():
            raise DomainError(f"{view!r} must be prepared before rendering")

        tag = self.tag_for(view)
        parts = [self.open_tag(view, tag), self._escape(view.get_title())]
        for child in view:
            if isinstance(child, View):
                parts.append(self.render_view(child, label))
            else:
                parts.append(self.render(child, label))
        parts.append(self.close_tag(tag))
        logger.debug("Rendered %r with %d children", view, view.count())
        return self._markup("".join(parts))

    @staticmethod
    def _require_name(element: Element) -> Any:
        name = element.get_name()
        if name is None or name == "":
            raise DomainError(
                f"{type(element).__name__} requires that the element has an assigned name; none discovered"
            )
        return name


def render_view(
    view: View,
    config: Optional[RenderConfig] = None,
    label: bool = False,
    factory: Optional[ElementFactory] = None,
) -> str:
    """Render a prepared view with a default helper."""
    return MarkupHelper(config=config, factory=factory).render_view(view, label)

"""
Base attribute-bag element.

An Element carries a name, a bag of markup attributes and a free-form options
map. The name lives in the attribute bag under "name", so renaming an element
is a plain attribute write.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, Optional

from ..core.exceptions import InvalidArgumentError
from .protocols import PrepareRole

if TYPE_CHECKING:
    from .view import View

logger = logging.getLogger(__name__)

AttributeValue = Any  # str | int | float | bool | None


def _describe(value: Any) -> str:
    return type(value).__name__


def as_mapping(value: Any, caller: str = "as_mapping") -> dict:
    """
    Normalise a mapping or an iterable of (key, value) pairs to a dict.

    Args:
        value: Mapping or pair iterable
        caller: Method name used in the error message

    Returns:
        A new dict with string keys

    Raises:
        InvalidArgumentError: If value has any other shape
    """
    if isinstance(value, Mapping):
        result = dict(value)
    elif isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise InvalidArgumentError(
            f"{caller} expects a mapping or an iterable of (key, value) pairs; "
            f'received "{_describe(value)}"'
        )
    else:
        try:
            result = dict(value)
        except (TypeError, ValueError) as e:
            raise InvalidArgumentError(
                f"{caller} expects an iterable of (key, value) pairs: {e}"
            ) from e

    for key in result:
        if not isinstance(key, str):
            raise InvalidArgumentError(
                f'{caller} expects string keys; received key of type "{_describe(key)}"'
            )
    return result


class Element:
    """
    A named bag of attributes plus an options map.

    Usage:
        element = Element("email", {"label": "E-mail", "attributes": {"id": "email"}})
        element.get_name()          # "email"
        element.get_attribute("id") # "email"
        element.get_label()         # "E-mail"
    """

    prepare_role = PrepareRole.NONE

    def __init__(self, name: Optional[str] = None, options: Any = None):
        self._attributes: dict[str, AttributeValue] = {}
        self._options: dict[str, Any] = {}

        if name is not None:
            self.set_name(name)

        if options:
            self.set_options(options)

    def init(self) -> None:
        """Hook called by the factory once an element is built. Override if needed."""
        pass

    # -- name -----------------------------------------------------------------

    def set_name(self, name: str) -> "Element":
        return self.set_attribute("name", name)

    def get_name(self) -> Optional[str]:
        return self.get_attribute("name")

    # -- options --------------------------------------------------------------

    def set_options(self, options: Any) -> "Element":
        """
        Replace the options map.

        An "attributes" entry is merged into the attribute bag first. Passing
        an Element reapplies that element's current options.

        Args:
            options: Mapping, iterable of (key, value) pairs, or an Element

        Raises:
            InvalidArgumentError: If options has any other shape
        """
        if isinstance(options, Element):
            options = options.get_options()
        options = as_mapping(options, f"{type(self).__name__}.set_options")

        if options.get("attributes") is not None:
            self.set_attributes(options["attributes"])
        self._options = options
        return self

    def get_options(self) -> dict[str, Any]:
        return dict(self._options)

    def get_option(self, option: str) -> Any:
        return self._options.get(option)

    def get_type(self) -> Optional[str]:
        return self._options.get("type")

    def get_label(self) -> Optional[str]:
        return self._options.get("label")

    def get_title(self) -> Optional[str]:
        return self._options.get("title")

    def is_password(self) -> bool:
        """True when options["options"]["isPassword"] is True or the string "True"."""
        nested = self._options.get("options")
        if not isinstance(nested, Mapping):
            return False
        flag = nested.get("isPassword")
        return flag is True or flag == "True"

    # -- attributes -----------------------------------------------------------

    def set_attribute(self, key: str, value: AttributeValue) -> "Element":
        self._attributes[key] = value
        return self

    def get_attribute(self, key: str) -> AttributeValue:
        return self._attributes.get(key)

    def has_attribute(self, key: str) -> bool:
        return key in self._attributes

    def remove_attribute(self, key: str) -> "Element":
        self._attributes.pop(key, None)
        return self

    def set_attributes(self, attributes: Any) -> "Element":
        """Merge many attributes at once; existing keys not named are kept."""
        for key, value in as_mapping(attributes, f"{type(self).__name__}.set_attributes").items():
            self.set_attribute(key, value)
        return self

    def get_attributes(self) -> dict[str, AttributeValue]:
        return dict(self._attributes)

    def remove_attributes(self, keys: Iterable[str]) -> "Element":
        for key in keys:
            self._attributes.pop(key, None)
        return self

    def clear_attributes(self) -> "Element":
        self._attributes = {}
        return self

    # -- copying --------------------------------------------------------------

    def clone(self) -> "Element":
        """Return an independent copy of this element."""
        duplicate = copy.copy(self)
        duplicate._attributes = dict(self._attributes)
        duplicate._options = copy.deepcopy(self._options)
        return duplicate

    def __deepcopy__(self, memo: dict) -> "Element":
        # Elements nested in options are cloned, never pickled
        return self.clone()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.get_name()!r})"


class PreparableElement(Element):
    """
    Leaf element with a single-step preparation hook.

    The owning view calls prepare_element() once during its own prepare().
    Subclasses override the hook to apply owner-specific setup.
    """

    prepare_role = PrepareRole.PREPARABLE

    def prepare_element(self, owner: View) -> None:
        logger.debug("Preparing %r for %r", self, owner)

"""
Composite view: an element owning named children in priority order.

Children are registered by name and rendered from highest to lowest priority,
first-added first among equal priorities. The name lookup and the priority
order live in a single ElementCollection so they can never drift apart.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, Callable, Iterator, Optional

from ..core.exceptions import InvalidArgumentError, InvalidElementError
from ..core.priority_queue import EXTR_BOTH, PriorityQueue
from .element import Element, as_mapping
from .protocols import PrepareRole

if TYPE_CHECKING:
    from .factory import ElementFactory

logger = logging.getLogger(__name__)


class _Slot:
    """Queue entry owned by exactly one registered name."""

    __slots__ = ("name", "element")

    def __init__(self, name: str, element: Element):
        self.name = name
        self.element = element


class ElementCollection:
    """
    Name lookup plus priority order, mutated as one unit.

    The only mutators are insert() and remove(); both update the lookup map
    and the queue under the same lock. Each name owns its own queue slot, so
    one element registered under two names occupies two independent slots.
    """

    def __init__(self):
        self._slots: dict[str, _Slot] = {}
        self._priorities: dict[str, int] = {}
        self._queue = PriorityQueue()
        self._lock = threading.RLock()

    def insert(self, name: str, element: Element, priority: int = 0) -> Optional[Element]:
        """
        Register an element under a name.

        An element already registered under the same name is removed from
        both structures first.

        Returns:
            The replaced element, or None
        """
        with self._lock:
            replaced = self._remove_locked(name)
            slot = _Slot(name, element)
            self._queue.insert(slot, priority)
            self._slots[name] = slot
            self._priorities[name] = priority
            return replaced

    def remove(self, name: str) -> Optional[Element]:
        """Unregister a name. Returns the removed element, or None if absent."""
        with self._lock:
            return self._remove_locked(name)

    def _remove_locked(self, name: str) -> Optional[Element]:
        slot = self._slots.pop(name, None)
        if slot is None:
            return None
        del self._priorities[name]
        self._queue.remove(slot)
        return slot.element

    def get(self, name: str) -> Optional[Element]:
        with self._lock:
            slot = self._slots.get(name)
            return slot.element if slot is not None else None

    def has(self, name: str) -> bool:
        with self._lock:
            return name in self._slots

    def priority_of(self, name: str) -> Optional[int]:
        with self._lock:
            return self._priorities.get(name)

    def names(self) -> list[str]:
        """Registered names in lookup (registration) order."""
        with self._lock:
            return list(self._slots)

    def values(self) -> list[Element]:
        """Registered elements in lookup (registration) order."""
        with self._lock:
            return [slot.element for slot in self._slots.values()]

    def entries(self) -> list[tuple[str, Element, int]]:
        """(name, element, priority) triples in priority order."""
        with self._lock:
            return [
                (slot.name, slot.element, priority)
                for slot, priority in self._queue.to_list(EXTR_BOTH)
            ]

    def copy_with(self, transform: Callable[[Element], Element]) -> "ElementCollection":
        """
        Build a new collection by transforming every element.

        Elements are re-registered under their original names at their
        original priorities, in the original order. An element registered
        under several names is transformed once and shared by those names
        in the copy as well.
        """
        duplicate = ElementCollection()
        transformed: dict[int, Element] = {}
        for name, element, priority in self.entries():
            if id(element) not in transformed:
                transformed[id(element)] = transform(element)
            duplicate.insert(name, transformed[id(element)], priority)
        return duplicate

    def __iter__(self) -> Iterator[Element]:
        with self._lock:
            return iter([slot.element for slot in self._queue])

    def __len__(self) -> int:
        with self._lock:
            return len(self._queue)


class View(Element):
    """
    Element composed of named, priority-ordered children.

    Usage:
        view = View("profile")
        view.add({"name": "email", "label": "E-mail"})
        view.add(Element("avatar"), {"priority": 10})
        view.prepare()
        [child.get_name() for child in view]  # ["avatar", "email"]
    """

    prepare_role = PrepareRole.COMPOSABLE

    def __init__(self, name: Optional[str] = None, options: Any = None):
        self._children = ElementCollection()
        self._prepared = False
        self._factory: Optional[ElementFactory] = None
        super().__init__(name, options)

    # -- factory --------------------------------------------------------------

    def set_view_factory(self, factory: ElementFactory) -> "View":
        """Compose the factory used when add() receives a config instead of an element."""
        self._factory = factory
        return self

    def get_view_factory(self) -> ElementFactory:
        """Return the composed factory, creating a default one on first use."""
        if self._factory is None:
            from .factory import ElementFactory

            self.set_view_factory(ElementFactory())
        return self._factory

    # -- children -------------------------------------------------------------

    def add(self, element: Any, flags: Optional[Mapping[str, Any]] = None) -> "View":
        """
        Add a child element.

        A mapping (or iterable of key/value pairs) is built into an element
        by the view factory first. The original input is then applied to the
        element through set_options(), so a config is both the recipe for the
        element and its options.

        Args:
            element: An Element, a config mapping, or an iterable of pairs
            flags: Optional "name" (alias to register and rename to) and
                   "priority" (int, default 0)

        Returns:
            self, for chaining

        Raises:
            InvalidArgumentError: If the input cannot be turned into an element,
                no name can be resolved, or the priority is not an int
        """
        flags = dict(flags or {})
        options = element

        if not isinstance(element, Element):
            if not isinstance(element, Iterable) or isinstance(element, (str, bytes)):
                raise InvalidArgumentError(
                    f"{type(self).__name__}.add requires an Element or a config mapping; "
                    f'received "{type(element).__name__}"'
                )
            if not isinstance(element, Mapping):
                # Materialise pairs once so the factory and set_options see the same config
                options = as_mapping(element, f"{type(self).__name__}.add")
            element = self.get_view_factory().create(options)

        flag_name = flags.get("name")
        has_flag_name = flag_name is not None and flag_name != ""
        name = flag_name if has_flag_name else element.get_name()
        if name is None or name == "":
            raise InvalidArgumentError(
                f"{type(self).__name__}.add: element is not named, and no name provided in flags"
            )

        priority = self._check_priority(flags.get("priority", 0), "add")

        if has_flag_name:
            # Rename the element to the specified alias
            element.set_name(name)
        element.set_options(options)

        replaced = self._children.insert(name, element, priority)
        if replaced is not None and replaced is not element:
            logger.debug("%r replaced child %r", self, name)
        logger.debug("%r added %r at priority %d", self, name, priority)
        return self

    def has(self, name: str) -> bool:
        return self._children.has(name)

    def get(self, name: str) -> Element:
        """
        Retrieve a named child.

        Raises:
            InvalidElementError: If no child is registered under the name
        """
        element = self._children.get(name)
        if element is None:
            raise InvalidElementError(f"No element by the name of [{name}] found in view")
        return element

    def remove(self, name: str) -> "View":
        """Remove a named child. Unknown names are ignored."""
        if self._children.remove(name) is not None:
            logger.debug("%r removed %r", self, name)
        return self

    def set_priority(self, name: str, priority: int) -> "View":
        """
        Move a child to a new priority, behind any children already there.

        The child stays registered under the same name and has its own
        options re-applied, as add() would.
        """
        element = self.get(name)
        priority = self._check_priority(priority, "set_priority")
        element.set_options(element)
        self._children.insert(name, element, priority)
        logger.debug("%r moved %r to priority %d", self, name, priority)
        return self

    def _check_priority(self, priority: Any, caller: str) -> int:
        if isinstance(priority, bool) or not isinstance(priority, int):
            raise InvalidArgumentError(
                f'{type(self).__name__}.{caller}: priority must be an int; received "{type(priority).__name__}"'
            )
        return priority

    def get_priority(self, name: str) -> int:
        """Return the priority a child is registered at."""
        priority = self._children.priority_of(name)
        if priority is None:
            raise InvalidElementError(f"No element by the name of [{name}] found in view")
        return priority

    def get_elements(self) -> dict[str, Element]:
        """All children keyed by name, in registration order."""
        return dict(zip(self._children.names(), self._children.values()))

    def count(self) -> int:
        return len(self._children)

    def get_iterator(self) -> Iterator[Element]:
        """Children from highest to lowest priority."""
        return iter(self._children)

    def __iter__(self) -> Iterator[Element]:
        return self.get_iterator()

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def __bool__(self) -> bool:
        # A view is truthy even without children
        return True

    # -- lifecycle ------------------------------------------------------------

    def is_prepared(self) -> bool:
        return self._prepared

    def prepare(self) -> "View":
        """
        Make the view ready to render. Only the first call has any effect.

        Composable children are prepared recursively; preparable children get
        their single-step hook with this view as owner.
        """
        if self._prepared:
            return self

        for element in self.get_iterator():
            role = element.prepare_role
            if role is PrepareRole.COMPOSABLE:
                element.prepare()
            elif role is PrepareRole.PREPARABLE:
                element.prepare_element(self)

        self._prepared = True
        logger.debug("%r prepared with %d children", self, self.count())
        return self

    def prepare_element(self, owner: "View") -> None:
        """Forward an owner's single-step preparation to prepare-aware children."""
        for element in self._children.values():
            if element.prepare_role is not PrepareRole.NONE:
                element.prepare_element(owner)

    # -- copying --------------------------------------------------------------

    def clone(self) -> "View":
        """
        Deep clone the view and every descendant.

        The clone keeps child order and priorities, shares no children with
        the original, and starts unprepared.
        """
        duplicate = super().clone()
        duplicate._children = self._children.copy_with(lambda child: child.clone())
        duplicate._prepared = False
        return duplicate

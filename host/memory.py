"""In-memory host surface.

A small element tree that behaves like the parts of a DOM the monitor
relies on: id lookup, an 'active' state per element, text content,
capture-order click dispatch, subtree removal notifications and a global
capability table. It backs the simulation CLI and the test suite, and is
the reference for writing adapters to real front ends.
"""

from dataclasses import dataclass, field
import logging
from typing import Any, Callable, Dict, List, Optional

from host.surface import (
    ErrorCallback,
    HostError,
    HostSurface,
    HostSurfaceError,
    InteractionCallback,
    InteractionEvent,
    StructuralChange,
    StructureCallback,
    TargetDescriptor,
)


logger = logging.getLogger(__name__)


@dataclass
class Element:
    """A node in the in-memory tree.

    Attributes:
        element_id: Unique id within the surface.
        tag_name: Tag or widget type.
        class_name: Space separated class names.
        text: Text content.
        parent_id: Id of the parent node, None for children of the root.
        active: Whether the 'active' state is set.
        handlers: Activation handlers, run on click.
        has_click_listener: Handler-presence flag.
    """
    element_id: str
    tag_name: str = "div"
    class_name: str = ""
    text: str = ""
    parent_id: Optional[str] = None
    active: bool = False
    handlers: List[Callable[[], None]] = field(default_factory=list)
    has_click_listener: bool = False

    def descriptor(self) -> TargetDescriptor:
        return TargetDescriptor(
            element_id=self.element_id,
            class_name=self.class_name,
            tag_name=self.tag_name.upper(),
            text=self.text[:50],
            has_listener=self.has_click_listener,
        )


class MemorySurface(HostSurface):
    """HostSurface implementation backed by plain Python objects.

    Example:
        surface = MemorySurface()
        surface.add_element('settingsFab', tag_name='button', text='Settings')
        surface.attach_handler('settingsFab', lambda: surface.set_active('settingsModal'))
        surface.click('settingsFab')
    """

    def __init__(self):
        self._elements: Dict[str, Element] = {}
        self._capabilities: Dict[str, Callable[..., Any]] = {}
        self._interaction_subscribers: List[InteractionCallback] = []
        self._structure_subscribers: List[StructureCallback] = []
        self._error_subscribers: List[ErrorCallback] = []

    # Tree building

    def add_element(
        self,
        element_id: str,
        tag_name: str = "div",
        class_name: str = "",
        text: str = "",
        parent_id: Optional[str] = None,
    ) -> Element:
        """Insert a new element.

        Raises:
            HostSurfaceError: If the id is taken or the parent is missing.
        """
        if element_id in self._elements:
            raise HostSurfaceError(f"Duplicate element id: {element_id}", element_id)
        if parent_id is not None and parent_id not in self._elements:
            raise HostSurfaceError(f"Parent element not found: {parent_id}", parent_id)

        element = Element(
            element_id=element_id,
            tag_name=tag_name,
            class_name=class_name,
            text=text,
            parent_id=parent_id,
        )
        self._elements[element_id] = element
        self._notify_structure(StructuralChange(added=[element_id]))
        return element

    def remove_element(self, element_id: str) -> bool:
        """Remove an element and all of its descendants.

        Returns:
            True if the element existed.
        """
        if element_id not in self._elements:
            return False

        removed = self._subtree(element_id)
        for node_id in removed:
            del self._elements[node_id]

        self._notify_structure(StructuralChange(removed=removed))
        return True

    def get(self, element_id: str) -> Optional[Element]:
        return self._elements.get(element_id)

    def attach_handler(
        self,
        element_id: str,
        handler: Callable[[], None],
        mark: bool = True,
    ) -> None:
        """Attach an activation handler to an element.

        Args:
            element_id: Target element.
            handler: Zero-argument callable run on click.
            mark: Whether to set the handler-presence flag.

        Raises:
            HostSurfaceError: If the element does not exist.
        """
        element = self._require(element_id)
        element.handlers.append(handler)
        if mark:
            element.has_click_listener = True

    def set_text(self, element_id: str, text: str) -> None:
        self._require(element_id).text = text

    def define_capability(self, name: str, func: Callable[..., Any]) -> None:
        self._capabilities[name] = func

    def remove_capability(self, name: str) -> None:
        self._capabilities.pop(name, None)

    # Simulated user and runtime activity

    def click(self, element_id: str) -> None:
        """Dispatch a click on an element.

        Interaction subscribers see the event first, then the element's
        own handlers run. A handler that raises is reported on the error
        feed instead of propagating.

        Raises:
            HostSurfaceError: If the element does not exist.
        """
        element = self._require(element_id)
        event = InteractionEvent(kind='click', target=element.descriptor())

        for callback in list(self._interaction_subscribers):
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Interaction subscriber failed: {e}", exc_info=True)

        for handler in list(element.handlers):
            try:
                handler()
            except Exception as e:
                self.raise_error(str(e), source=f"handler:{element_id}")

    def raise_error(
        self,
        message: str,
        kind: str = "error",
        source: Optional[str] = None,
        stack: Optional[str] = None,
    ) -> None:
        """Publish an uncaught error on the error feed."""
        error = HostError(kind=kind, message=message, source=source, stack=stack)
        for callback in list(self._error_subscribers):
            try:
                callback(error)
            except Exception as e:
                logger.error(f"Error subscriber failed: {e}", exc_info=True)

    # HostSurface

    def exists(self, element_id: str) -> bool:
        return element_id in self._elements

    def describe(self, element_id: str) -> Optional[TargetDescriptor]:
        element = self._elements.get(element_id)
        return element.descriptor() if element else None

    def is_active(self, element_id: str) -> bool:
        element = self._elements.get(element_id)
        return bool(element and element.active)

    def text_of(self, element_id: str) -> str:
        element = self._elements.get(element_id)
        return element.text if element else ""

    def set_active(self, element_id: str, active: bool = True) -> bool:
        element = self._elements.get(element_id)
        if element is None:
            return False
        element.active = active
        return True

    def replace_element(
        self,
        element_id: str,
        handler: Callable[[], None],
    ) -> bool:
        old = self._elements.get(element_id)
        if old is None:
            return False

        fresh = Element(
            element_id=old.element_id,
            tag_name=old.tag_name,
            class_name=old.class_name,
            text=old.text,
            parent_id=old.parent_id,
            active=old.active,
            handlers=[handler],
            has_click_listener=True,
        )
        self._elements[element_id] = fresh
        self._notify_structure(
            StructuralChange(added=[element_id], removed=[element_id])
        )
        return True

    def has_capability(self, name: str) -> bool:
        return callable(self._capabilities.get(name))

    def invoke_capability(self, name: str, *args: Any) -> Any:
        func = self._capabilities.get(name)
        if not callable(func):
            raise HostSurfaceError(f"{name} is not a function")
        return func(*args)

    def subscribe_interactions(self, callback: InteractionCallback) -> None:
        self._interaction_subscribers.append(callback)

    def subscribe_structure(self, callback: StructureCallback) -> None:
        self._structure_subscribers.append(callback)

    def subscribe_errors(self, callback: ErrorCallback) -> None:
        self._error_subscribers.append(callback)

    # Internals

    def _require(self, element_id: str) -> Element:
        element = self._elements.get(element_id)
        if element is None:
            raise HostSurfaceError(f"Element not found: {element_id}", element_id)
        return element

    def _subtree(self, root_id: str) -> List[str]:
        ids = [root_id]
        i = 0
        while i < len(ids):
            parent = ids[i]
            ids.extend(
                node_id for node_id, node in self._elements.items()
                if node.parent_id == parent
            )
            i += 1
        return ids

    def _notify_structure(self, change: StructuralChange) -> None:
        for callback in list(self._structure_subscribers):
            try:
                callback(change)
            except Exception as e:
                logger.error(f"Structure subscriber failed: {e}", exc_info=True)


def build_demo_surface() -> MemorySurface:
    """Build the interface the monitor was written for.

    A settings floating button that opens a settings modal (with a save
    button and a database connection test), and a chat floating button
    that opens a chat panel. All handlers and the openSettings /
    closeSettings capabilities are wired up and healthy.
    """
    surface = MemorySurface()

    surface.add_element('app', tag_name='main')
    surface.add_element('settingsFab', tag_name='button', class_name='fab',
                        text='Settings', parent_id='app')
    surface.add_element('settingsModal', class_name='modal', parent_id='app')
    surface.add_element('saveSettingsBtn', tag_name='button', class_name='btn-primary',
                        text='Save Settings', parent_id='settingsModal')
    surface.add_element('testConnectionBtn', tag_name='button', class_name='btn',
                        text='Test Connection', parent_id='settingsModal')
    surface.add_element('dbTestResult', class_name='test-result', parent_id='settingsModal')
    surface.add_element('chatFab', tag_name='button', class_name='fab',
                        text='Chat', parent_id='app')
    surface.add_element('chatPanel', class_name='panel', parent_id='app')

    surface.define_capability('openSettings', lambda: surface.set_active('settingsModal', True))
    surface.define_capability('closeSettings', lambda: surface.set_active('settingsModal', False))
    surface.define_capability(
        'dbTestConnection',
        lambda: surface.set_text('dbTestResult', 'Connection successful'),
    )

    surface.attach_handler('settingsFab', lambda: surface.invoke_capability('openSettings'))
    surface.attach_handler('chatFab', lambda: surface.set_active('chatPanel', True))
    surface.attach_handler('saveSettingsBtn', lambda: surface.invoke_capability('closeSettings'))
    surface.attach_handler('testConnectionBtn',
                           lambda: surface.invoke_capability('dbTestConnection'))

    return surface

"""Host surface abstraction for the UI health monitor.

The monitor never touches a concrete UI toolkit. Everything it needs from
the rendered interface goes through the HostSurface interface defined
here: element lookup and state inspection, element replacement, global
capability lookup, and three feeds (interactions, structural changes,
uncaught errors). A web, native or terminal front end supplies its own
adapter.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional


class HostSurfaceError(Exception):
    """Exception raised when a host surface operation is misused."""

    def __init__(self, message: str, element_id: Optional[str] = None):
        """Initialize the error.

        Args:
            message: Error description.
            element_id: The element involved, if applicable.
        """
        self.element_id = element_id
        super().__init__(message)


@dataclass(frozen=True)
class TargetDescriptor:
    """Stable identity of an element that was acted upon.

    Attributes:
        element_id: Element identifier ('' if the element has none).
        class_name: Space separated class names.
        tag_name: Element tag or widget type.
        text: Visible text, truncated to 50 characters.
        has_listener: Best-effort handler-presence flag. Set when the
            monitor itself attached a handler; not true introspection.
    """
    element_id: str = ""
    class_name: str = ""
    tag_name: str = ""
    text: str = ""
    has_listener: bool = False

    @property
    def description(self) -> str:
        """Short label: id, else class, else tag."""
        return self.element_id or self.class_name or self.tag_name or "unknown"

    def to_dict(self) -> dict:
        return {
            'id': self.element_id,
            'className': self.class_name,
            'tagName': self.tag_name,
            'text': self.text,
            'description': self.description,
        }


@dataclass
class InteractionEvent:
    """A user interaction observed on the surface.

    Attributes:
        kind: Interaction type (only 'click' is produced today).
        target: Descriptor of the element acted upon.
    """
    kind: str
    target: TargetDescriptor


@dataclass
class StructuralChange:
    """A batch of structural changes under the document root.

    Attributes:
        added: Ids of nodes inserted in this batch.
        removed: Ids of nodes removed in this batch, descendants included.
    """
    added: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)


@dataclass
class HostError:
    """An uncaught error reported by the host.

    Attributes:
        kind: 'error' or 'unhandledRejection'.
        message: Error message text.
        source: File or module the error came from.
        line: Line number, if known.
        column: Column number, if known.
        stack: Stack trace text, if available.
    """
    kind: str
    message: str
    source: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None
    stack: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'type': self.kind,
            'message': self.message,
            'filename': self.source,
            'lineno': self.line,
            'colno': self.column,
            'stack': self.stack,
        }


InteractionCallback = Callable[[InteractionEvent], None]
StructureCallback = Callable[[StructuralChange], None]
ErrorCallback = Callable[[HostError], None]


class HostSurface(ABC):
    """Abstract base class for host UI surfaces.

    This interface defines what the monitor consumes from the rendered
    interface, so adapters for different front ends can be swapped.
    """

    @abstractmethod
    def exists(self, element_id: str) -> bool:
        """Check whether an element with this id is present."""
        pass

    @abstractmethod
    def describe(self, element_id: str) -> Optional[TargetDescriptor]:
        """Describe an element, or return None if it is not found."""
        pass

    @abstractmethod
    def is_active(self, element_id: str) -> bool:
        """Check whether a region is in its 'active' state.

        Returns False when the element does not exist.
        """
        pass

    @abstractmethod
    def text_of(self, element_id: str) -> str:
        """Return the textual content of a region ('' if not found)."""
        pass

    @abstractmethod
    def set_active(self, element_id: str, active: bool = True) -> bool:
        """Set or clear a region's 'active' state.

        Returns:
            True if the element was found.
        """
        pass

    @abstractmethod
    def replace_element(
        self,
        element_id: str,
        handler: Callable[[], None],
    ) -> bool:
        """Replace an element with a fresh unbound copy.

        The copy keeps the original's id, classes and text but none of its
        handlers; handler is attached as its only activation handler and
        its handler-presence flag is set.

        Args:
            element_id: Element to replace.
            handler: Activation handler for the fresh copy.

        Returns:
            True if the element was found and replaced.
        """
        pass

    @abstractmethod
    def has_capability(self, name: str) -> bool:
        """Check whether a named global function is currently defined."""
        pass

    @abstractmethod
    def invoke_capability(self, name: str, *args: Any) -> Any:
        """Call a named global function.

        Raises:
            HostSurfaceError: If the capability is not defined.
        """
        pass

    @abstractmethod
    def subscribe_interactions(self, callback: InteractionCallback) -> None:
        """Receive every click-equivalent event before element handlers run."""
        pass

    @abstractmethod
    def subscribe_structure(self, callback: StructureCallback) -> None:
        """Receive structural change batches for the whole tree."""
        pass

    @abstractmethod
    def subscribe_errors(self, callback: ErrorCallback) -> None:
        """Receive uncaught errors raised inside the host."""
        pass

"""Host capability interfaces and adapters for the UI health monitor."""

from host.surface import (
    HostSurface,
    HostSurfaceError,
    TargetDescriptor,
    InteractionEvent,
    StructuralChange,
    HostError,
)
from host.memory import (
    Element,
    MemorySurface,
    build_demo_surface,
)
from host.shell import (
    AppShell,
    ConsoleShell,
    host_identification,
)
from host.timers import (
    Scheduler,
    SchedulerError,
    TimerHandle,
    AsyncioScheduler,
    ManualScheduler,
    create_scheduler,
)

__all__ = [
    'HostSurface',
    'HostSurfaceError',
    'TargetDescriptor',
    'InteractionEvent',
    'StructuralChange',
    'HostError',
    'Element',
    'MemorySurface',
    'build_demo_surface',
    'AppShell',
    'ConsoleShell',
    'host_identification',
    'Scheduler',
    'SchedulerError',
    'TimerHandle',
    'AsyncioScheduler',
    'ManualScheduler',
    'create_scheduler',
]

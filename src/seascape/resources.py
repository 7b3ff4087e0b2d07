"""Reference-counted render resources shared between surfaces.

A surface receives a ``SharedResource`` explicitly, acquires it on
construction and releases it on close. The value is built on the first
acquire and torn down when the last holder releases it.
"""

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

import structlog

from .exceptions import ResourceError

logger = structlog.get_logger()

T = TypeVar("T")


@dataclass(frozen=True)
class RenderProgram:
    """Renderer-side program description a surface draws with.

    The renderer compiles and owns the actual GPU program; the core only
    names it and lists the uniforms it will supply.
    """

    name: str
    uniforms: tuple[str, ...]


TERRAIN_UNIFORMS = ("modelMatrix", "viewMatrix", "projectionMatrix")
OCEAN_UNIFORMS = TERRAIN_UNIFORMS + ("waterColor", "foamColor", "transparency", "time")


class SharedResource(Generic[T]):
    """Lazily built value with acquire/release reference counting."""

    def __init__(
        self,
        name: str,
        factory: Callable[[], T],
        teardown: Callable[[T], None] | None = None,
    ):
        self.name = name
        self._factory = factory
        self._teardown = teardown
        self._value: T | None = None
        self._count = 0

    @property
    def ref_count(self) -> int:
        return self._count

    @property
    def alive(self) -> bool:
        return self._value is not None

    @property
    def value(self) -> T:
        """The shared value.

        Raises:
            ResourceError: If no holder has acquired the resource.
        """
        if self._value is None:
            raise ResourceError(f"Resource '{self.name}' is not acquired")
        return self._value

    def acquire(self) -> T:
        """Take a reference, building the value on first use."""
        if self._value is None:
            self._value = self._factory()
            logger.debug("resource_created", resource=self.name)
        self._count += 1
        return self._value

    def release(self) -> None:
        """Drop a reference, tearing the value down with the last one.

        Raises:
            ResourceError: If there is no outstanding reference.
        """
        if self._count == 0:
            raise ResourceError(f"Resource '{self.name}' released more than acquired")
        self._count -= 1
        if self._count == 0:
            value, self._value = self._value, None
            if self._teardown is not None and value is not None:
                self._teardown(value)
            logger.debug("resource_released", resource=self.name)


class ResourceRegistry:
    """One shared program resource per surface kind."""

    def __init__(self) -> None:
        self._resources: dict[str, SharedResource[RenderProgram]] = {}

    def program(self, kind: str, uniforms: tuple[str, ...]) -> SharedResource[RenderProgram]:
        """Get (or create) the shared program resource for ``kind``."""
        if kind not in self._resources:
            self._resources[kind] = SharedResource(
                kind, lambda: RenderProgram(name=kind, uniforms=uniforms)
            )
        return self._resources[kind]

    def terrain_program(self) -> SharedResource[RenderProgram]:
        return self.program("terrain", TERRAIN_UNIFORMS)

    def ocean_program(self) -> SharedResource[RenderProgram]:
        return self.program("ocean", OCEAN_UNIFORMS)

    def live_resources(self) -> list[str]:
        """Names of resources that currently hold a built value."""
        return [name for name, res in self._resources.items() if res.alive]

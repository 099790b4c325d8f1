"""
Strategy Registry for spritegen.

Configuration refers to strategies either by name or by passing an
implementation directly. Both forms are normalized once, at the
configuration boundary, into a tagged reference:

    Named("vertical")          -> looked up in the registry
    Custom(MyLayoutEngine())   -> used as is

Resolution is permissive and never raises. A name that is not registered
resolves to a registry-specific fallback (the bare name for layouts and
compositors, a template file for stylesheets); the pipeline raises
ConfigurationError when it tries to use a value that lacks the required
capability.

Usage:
    registries = default_registries()
    registries.layouts.register("grid", GridLayout())

    engine = registries.layouts.resolve(Named("grid"))
    engine = registries.layouts.resolve(Custom(MyLayout()))
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Named:
    """Reference to a strategy registered under ``name``."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, eq=False)
class Custom:
    """A user-supplied strategy implementation."""

    implementation: Any

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Custom) and other.implementation is self.implementation

    def __hash__(self) -> int:
        return id(self.implementation)

    def __str__(self) -> str:
        impl = self.implementation
        return getattr(impl, "__qualname__", type(impl).__qualname__)


StrategyRef = Union[Named, Custom]


def as_strategy_ref(value: Any) -> StrategyRef:
    """Coerce a raw configuration value into a strategy reference."""
    if isinstance(value, Named | Custom):
        return value
    if isinstance(value, str):
        return Named(value)
    return Custom(value)


class StrategyRegistry(Generic[T]):
    """
    Name -> implementation lookup for one kind of strategy.

    Args:
        kind: Strategy kind used in log messages ("layout", "compositor", ...)
        entries: Initial registrations
        fallback: Builds a value for names that are not registered.
            Defaults to returning the name itself.
    """

    def __init__(
        self,
        kind: str,
        entries: Mapping[str, T] | None = None,
        fallback: Callable[[str], Any] | None = None,
    ) -> None:
        self.kind = kind
        self._entries: dict[str, T] = dict(entries or {})
        self._fallback = fallback

    def register(self, name: str, implementation: T) -> None:
        """Register (or replace) an implementation under ``name``."""
        if name in self._entries:
            logger.warning(f"Replacing {self.kind} strategy: {name}")
        self._entries[name] = implementation
        logger.debug(f"Registered {self.kind} strategy: {name}")

    def has(self, name: str) -> bool:
        return name in self._entries

    def get(self, name: str) -> T:
        """
        Get a registered implementation.

        Raises:
            KeyError: If nothing is registered under ``name``
        """
        if name not in self._entries:
            available = ", ".join(self._entries) or "(none)"
            raise KeyError(f"No {self.kind} strategy named '{name}'. Available: {available}")
        return self._entries[name]

    @property
    def names(self) -> list[str]:
        return list(self._entries)

    def resolve(self, ref: StrategyRef) -> T | Any:
        """Resolve a reference to an implementation without raising."""
        if isinstance(ref, Custom):
            return ref.implementation
        if ref.name in self._entries:
            return self._entries[ref.name]
        if self._fallback is not None:
            logger.debug(f"{self.kind} '{ref.name}' not registered, using fallback")
            return self._fallback(ref.name)
        return ref.name

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __repr__(self) -> str:
        return f"StrategyRegistry(kind={self.kind!r}, names={self.names})"


@dataclass
class StrategyRegistries:
    """The three registries consulted by the pipeline."""

    layouts: StrategyRegistry[Any] = field(
        default_factory=lambda: StrategyRegistry("layout")
    )
    compositors: StrategyRegistry[Any] = field(
        default_factory=lambda: StrategyRegistry("compositor")
    )
    stylesheets: StrategyRegistry[Any] = field(
        default_factory=lambda: StrategyRegistry("stylesheet")
    )


def default_registries() -> StrategyRegistries:
    """Build a fresh set of registries holding the built-in strategies."""
    from .compositor import BUILTIN_COMPOSITORS
    from .layout import BUILTIN_LAYOUTS
    from .stylesheet import BUILTIN_STYLESHEETS, FileTemplateStylesheet

    return StrategyRegistries(
        layouts=StrategyRegistry("layout", BUILTIN_LAYOUTS),
        compositors=StrategyRegistry("compositor", BUILTIN_COMPOSITORS),
        stylesheets=StrategyRegistry(
            "stylesheet", BUILTIN_STYLESHEETS, fallback=FileTemplateStylesheet
        ),
    )

"""Dependency injection container.

Holds the wired store, engines and service. The store is a resource with a
lifecycle, so registrations may carry a finalizer that close() runs.
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

T = TypeVar("T")


class Container:
    """
    Type-keyed registry of singletons and lazily built components.

    Components built by factories are remembered in build order; close()
    finalizes them newest first, so the service goes before the engines
    and the engines before the store they read.
    """

    def __init__(self) -> None:
        self._factories: dict[type, Callable[[Container], Any]] = {}
        self._finalizers: dict[type, Callable[[Any], None]] = {}
        self._instances: dict[type, Any] = {}
        self._resolution_order: list[type] = []

    def register_singleton(self, interface: type[T], instance: T) -> None:
        """
        Register an already-built component. close() never finalizes it.

        Args:
            interface: Key to resolve it by
            instance: The component
        """
        self._instances[interface] = instance

    def register_factory(
        self,
        interface: type[T],
        factory: Callable[[Container], T],
        finalizer: Callable[[T], None] | None = None,
    ) -> None:
        """
        Register a builder invoked on first resolve().

        Args:
            interface: Key to resolve it by
            factory: Receives this container, so it can resolve its own
                dependencies
            finalizer: Called with the built component by close()
        """
        self._factories[interface] = factory
        if finalizer is not None:
            self._finalizers[interface] = finalizer

    def resolve(self, interface: type[T]) -> T:
        """
        Return the component registered under interface, building it once.

        Raises:
            KeyError: If nothing is registered under interface
        """
        if interface in self._instances:
            return self._instances[interface]

        factory = self._factories.get(interface)
        if factory is None:
            raise KeyError(f"No registration found for {interface}")

        instance = factory(self)
        self._instances[interface] = instance
        self._resolution_order.append(interface)
        return instance

    def has(self, interface: type) -> bool:
        return interface in self._factories or interface in self._instances

    def close(self) -> None:
        """Finalize built components, newest first.

        Built components stay cached; only the finalizers run.
        """
        while self._resolution_order:
            interface = self._resolution_order.pop()
            finalizer = self._finalizers.get(interface)
            if finalizer is not None:
                finalizer(self._instances[interface])

    def clear(self) -> None:
        """Drop every registration and built component without finalizing."""
        self._factories.clear()
        self._finalizers.clear()
        self._instances.clear()
        self._resolution_order.clear()

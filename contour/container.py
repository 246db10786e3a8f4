"""Dependency container used to obtain resolvers and converters.

Hints name resolvers and converters by class. The container decides how
those classes are instantiated: registered factories and singletons take
precedence, and unregistered classes are built directly with their own
annotated dependencies injected.
"""

import inspect
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, Generic, Optional, TypeVar, cast, get_origin

T = TypeVar("T")


class DependencyNotFoundError(Exception):
    @classmethod
    def from_type(cls, dependency_type: type[T]) -> "DependencyNotFoundError":
        if hasattr(dependency_type, "__name__"):
            return cls(f"Dependency {dependency_type.__name__} not found")
        else:
            return cls(f"Dependency {dependency_type} not found")


class DependencyCircularReferenceError(Exception):
    @classmethod
    def from_container(cls, container: "DependencyContainer") -> "DependencyCircularReferenceError":
        return cls(f"Circular reference detected while resolving {container.all_resolving()}")


class Dependency(ABC, Generic[T]):
    @abstractmethod
    def resolve(self, container: "DependencyContainer") -> T:
        pass


class InstanceDependency(Dependency[T]):
    def __init__(self, instance: T):
        self.instance = instance

    def resolve(self, container: "DependencyContainer") -> T:
        return self.instance


class FactoryDependency(Dependency[T]):
    def __init__(self, factory: Callable[..., T]):
        self.factory = factory

    def resolve(self, container: "DependencyContainer") -> T:
        return self.factory(**self.get_dependencies(container))

    def get_dependencies(self, container: "DependencyContainer") -> dict[str, Any]:
        return {
            k: container.resolve_or_create(v.annotation)
            for k, v in inspect.signature(self.factory, eval_str=True).parameters.items()
            if v.annotation is not inspect.Parameter.empty
            and v.default is inspect.Parameter.empty
            and v.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        }


class SingletonDependency(Dependency[T]):
    def __init__(self, factory: FactoryDependency[T]):
        self.factory = factory
        self.instance: T | None = None
        self._resolving: bool = False
        # Re-entrant so that a circular reference on the same thread is
        # reported instead of deadlocking.
        self._lock = threading.RLock()

    def resolve(self, container: "DependencyContainer") -> T:
        if self.instance is not None:
            return self.instance

        with self._lock:
            if self._resolving:
                raise DependencyCircularReferenceError.from_container(container)

            if self.instance is None:
                self._resolving = True
                try:
                    self.instance = self.factory.resolve(container)
                finally:
                    self._resolving = False
            return self.instance


class DependencyContainer:
    """Registry of how resolver and converter types are instantiated.

    Examples:
        >>> container = DependencyContainer()
        >>> container.register_singleton(MediaConverter)
        >>> container.register_factory(PriceConverter, lambda: PriceConverter("EUR"))
        >>> container.resolve_or_create(MediaConverter) is container.resolve_or_create(MediaConverter)
        True
    """

    def __init__(self, parent: Optional["DependencyContainer"] = None):
        self.dependencies: dict[type, Dependency[Any]] = {}
        self.parent = parent

    def child(self) -> "DependencyContainer":
        return DependencyContainer(self)

    def all_resolving(self) -> list[type]:
        return [
            k for k in self.dependencies if getattr(self.dependencies[k], "_resolving", False)
        ] + (self.parent.all_resolving() if self.parent else [])

    def has(self, dependency_type: type) -> bool:
        if dependency_type in self.dependencies:
            return True
        origin = get_origin(dependency_type)
        if origin is not None and origin in self.dependencies:
            return True
        return self.parent is not None and self.parent.has(dependency_type)

    def resolve(self, dependency_type: type[T]) -> T:
        # First check ourselves for the dependency and then fall back to the
        # parent container if it exists.
        if dependency_type in self.dependencies:
            return cast("T", self.dependencies[dependency_type].resolve(self))

        # Generic types (e.g. EnumConverter[Color]) fall back to their origin
        origin = get_origin(dependency_type)
        if origin is not None and origin in self.dependencies:
            return cast("T", self.dependencies[origin].resolve(self))

        if self.parent is not None:
            return self.parent.resolve(dependency_type)

        raise DependencyNotFoundError.from_type(dependency_type)

    def resolve_or_create(self, dependency_type: type[T]) -> T:
        """Resolve a registered dependency, or build an unregistered class.

        Unregistered classes are constructed with their required annotated
        constructor parameters resolved from this container.

        Raises:
            DependencyNotFoundError: If the type is not registered and is not
                a class that can be constructed.
        """
        if self.has(dependency_type):
            return self.resolve(dependency_type)
        if not inspect.isclass(dependency_type) or inspect.isabstract(dependency_type):
            raise DependencyNotFoundError.from_type(dependency_type)
        return FactoryDependency(dependency_type).resolve(self)

    def register(
        self,
        dependency_type: type[T],
        dependency: Dependency[T],
    ) -> None:
        self.dependencies[dependency_type] = dependency

    def register_instance(self, dependency_type: type[T], instance: T) -> None:
        self.register(dependency_type, InstanceDependency(instance))

    def register_factory(
        self,
        dependency_type: type[T],
        factory: Callable[..., T],
    ) -> None:
        self.register(dependency_type, FactoryDependency(factory))

    def register_singleton(
        self, dependency_type: type[T], factory: Callable[..., T] | None = None
    ) -> None:
        factory_dependency = FactoryDependency(factory or dependency_type)
        self.register(dependency_type, SingletonDependency(factory_dependency))

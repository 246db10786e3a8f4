"""Deferred materialization of lazy destination properties.

Lazy properties are intercepted by re-classing a built instance as a
generated subclass of its own type. The subclass carries one data
descriptor per lazy property; the first read of a property runs its
deferred computation and every later read returns the cached result.

The subclass mirrors the destination type's name, qualified name and
module, ``isinstance`` checks keep working, and pickling or copying an
intercepted instance produces a plain instance of the destination type
with every lazy property materialized.
"""

import threading
from collections.abc import Callable, Iterable, Mapping
from typing import Any, Generic, TypeVar

from .resolution import Converted

T = TypeVar("T")

# Instance attribute holding the LazyPropertySource of an intercepted instance
_SOURCE_ATTR = "__contour_lazy_source__"

# Class attribute pointing from a generated subclass to the destination type
_PROJECTED_ATTR = "__contour_projected_type__"

_MISSING = object()


class LazyValue(Generic[T]):
    """A value computed at most once, on first access.

    Concurrent first reads are serialized: the first caller computes and
    the others wait for and receive the same result. If the computation
    raises, nothing is cached and the next read computes again.

    Example:
        >>> value = LazyValue(lambda: expensive())
        >>> value.is_value_created
        False
        >>> value.value is value.value
        True
    """

    __slots__ = ("_factory", "_value", "_created", "_lock")

    def __init__(self, factory: Callable[[], T]):
        self._factory: Callable[[], T] | None = factory
        self._value: T | None = None
        self._created = False
        self._lock = threading.Lock()

    @property
    def is_value_created(self) -> bool:
        return self._created

    @property
    def value(self) -> T:
        if self._created:
            return self._value  # type: ignore[return-value]

        with self._lock:
            if not self._created:
                self._value = self._factory()  # type: ignore[misc]
                self._created = True
                # Release the closure (and the content node it captured)
                self._factory = None
        return self._value  # type: ignore[return-value]


class LazyPropertySource:
    """The deferred computations of one intercepted instance.

    Each computation returns ``Converted`` when it produced a value, or
    None to fall back to the property's default.

    Args:
        computations: Zero argument computations keyed by property name.
        defaults: Values used when a computation produced nothing.
    """

    __slots__ = ("_values", "_defaults")

    def __init__(
        self,
        computations: Mapping[str, Callable[[], Converted | None]],
        defaults: Mapping[str, Any] | None = None,
    ):
        self._values = {name: LazyValue(computation) for name, computation in computations.items()}
        self._defaults = dict(defaults or {})

    def __contains__(self, name: object) -> bool:
        return name in self._values

    @property
    def names(self) -> Iterable[str]:
        return self._values.keys()

    def is_resolved(self, name: str) -> bool:
        return self._values[name].is_value_created

    def try_get_cached(self, name: str) -> Converted | None:
        """Get the value of a property if it has already been computed."""
        lazy = self._values[name]
        if not lazy.is_value_created:
            return None
        return Converted(self._settle(name, lazy.value))

    def compute_and_cache(self, name: str) -> Any:
        """Get the value of a property, computing it if needed."""
        return self._settle(name, self._values[name].value)

    def _settle(self, name: str, outcome: Converted | None) -> Any:
        if outcome is not None:
            return outcome.value
        return self._defaults.get(name)


class LazyAttribute:
    """Data descriptor standing in for one lazy property.

    Explicit assignments are stored on the instance and win over the
    deferred computation.
    """

    __slots__ = ("name", "default")

    def __init__(self, name: str, default: Any = None):
        self.name = name
        self.default = default

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self

        state = instance.__dict__
        try:
            return state[self.name]
        except KeyError:
            pass

        source: LazyPropertySource | None = state.get(_SOURCE_ATTR)
        if source is None or self.name not in source:
            return self.default

        cached = source.try_get_cached(self.name)
        if cached is not None:
            return cached.value
        return source.compute_and_cache(self.name)

    def __set__(self, instance: Any, value: Any) -> None:
        instance.__dict__[self.name] = value

    def __delete__(self, instance: Any) -> None:
        try:
            del instance.__dict__[self.name]
        except KeyError:
            raise AttributeError(self.name) from None


def class_default(destination_type: type, name: str) -> Any:
    """Get the class level default of an attribute, skipping descriptors."""
    for klass in destination_type.__mro__:
        if name in vars(klass):
            value = vars(klass)[name]
            return None if hasattr(value, "__get__") else value
    return None


def projected_type(instance: Any) -> type:
    """Get the destination type of a (possibly intercepted) instance."""
    return getattr(type(instance), _PROJECTED_ATTR, type(instance))


def is_lazy_resolved(instance: Any, name: str) -> bool:
    """Check whether a lazy property of an instance has been computed.

    Returns False for properties that are not intercepted at all.
    """
    source = getattr(instance, "__dict__", {}).get(_SOURCE_ATTR)
    return source is not None and name in source and source.is_resolved(name)


def _restore(destination_type: type, state: dict[str, Any]) -> Any:
    instance = destination_type.__new__(destination_type)
    instance.__dict__.update(state)
    return instance


def _reduce_ex(self: Any, protocol: int) -> tuple[Any, ...]:
    state = dict(self.__dict__)
    source: LazyPropertySource | None = state.pop(_SOURCE_ATTR, None)
    if source is not None:
        for name in source.names:
            if name not in state:
                state[name] = getattr(self, name)
    return (_restore, (projected_type(self), state))


class LazyPropertyInterceptor:
    """Attaches deferred computations to instances of destination types.

    Generated subclasses are cached per destination type and set of lazy
    property names. Like the type metadata cache, the cache is append-only
    and tolerates concurrent first writes.

    Example:
        >>> interceptor = LazyPropertyInterceptor()
        >>> article = interceptor.intercept(Article(), {"body": lambda: Converted("<p>Hi</p>")})
        >>> isinstance(article, Article)
        True
        >>> article.body
        '<p>Hi</p>'
    """

    def __init__(self) -> None:
        self._proxies: dict[tuple[type, frozenset[str]], type] = {}

    def proxy_type(self, destination_type: type, names: frozenset[str]) -> type:
        key = (destination_type, names)
        try:
            return self._proxies[key]
        except KeyError:
            pass

        namespace: dict[str, Any] = {
            name: LazyAttribute(name, class_default(destination_type, name)) for name in names
        }
        namespace.update(
            {
                "__slots__": (),
                "__module__": destination_type.__module__,
                "__qualname__": destination_type.__qualname__,
                "__doc__": destination_type.__doc__,
                "__reduce_ex__": _reduce_ex,
                _PROJECTED_ATTR: destination_type,
            }
        )
        proxy = type(destination_type)(destination_type.__name__, (destination_type,), namespace)
        return self._proxies.setdefault(key, proxy)

    def intercept(self, instance: T, computations: Mapping[str, Callable[[], Converted | None]]) -> T:
        """Defer the given properties of an instance until they are read.

        Values the constructor already assigned to those properties become
        their defaults, used when a computation produces nothing.

        Args:
            instance: A freshly built instance, not yet shared.
            computations: Deferred computations keyed by property name.

        Returns:
            The same instance, now intercepting reads of the given properties.
        """
        if not computations:
            return instance

        destination_type = projected_type(instance)
        proxy = self.proxy_type(destination_type, frozenset(computations))

        state = instance.__dict__
        defaults = {name: class_default(destination_type, name) for name in computations}
        defaults.update({name: state.pop(name) for name in computations if name in state})
        state[_SOURCE_ATTR] = LazyPropertySource(computations, defaults)

        # Bypass any __setattr__ customisation of the destination type
        object.__setattr__(instance, "__class__", proxy)
        return instance

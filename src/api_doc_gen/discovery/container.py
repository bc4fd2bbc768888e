"""Dependency container used to build handler classes and their arguments."""

from typing import Any, Callable, Protocol

from api_doc_gen.errors import ContainerResolutionError


class Container(Protocol):
    def resolve(self, cls: type) -> Any: ...


class SimpleContainer:
    """Resolves explicitly bound types only.

    ``bind`` takes a factory, ``instance`` a ready object. Unbound types
    raise ContainerResolutionError, except when ``autowire`` is on, in
    which case they are constructed without arguments.
    """

    def __init__(self, autowire: bool = False):
        self.autowire = autowire
        self._factories: dict[type, Callable[[], Any]] = {}

    def bind(self, cls: type, factory: Callable[[], Any]) -> None:
        self._factories[cls] = factory

    def instance(self, cls: type, obj: Any) -> None:
        self._factories[cls] = lambda: obj

    def resolve(self, cls: type) -> Any:
        factory = self._factories.get(cls)
        if factory is not None:
            return factory()
        if self.autowire:
            try:
                return cls()
            except Exception as exc:
                raise ContainerResolutionError(f"Cannot build {cls.__name__}: {exc}") from exc
        raise ContainerResolutionError(f"No binding for {getattr(cls, '__name__', cls)!r}")

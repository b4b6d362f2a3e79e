import inspect
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from types import NoneType, UnionType
from typing import Any, Self, Union, get_args, get_origin, get_type_hints

type InjectionPlan = dict[str, type[Any]]


logger = logging.getLogger(__name__)




class ContainerError(Exception):
    """Base class for container errors."""


class DependencyNotFoundError(ContainerError):
    """Raised when a dependency cannot be resolved."""


class CircularDependencyError(ContainerError):
    """Raised when a circular dependency is detected."""


class RegistrationError(ContainerError):
    """Raised when there is an issue with service registration."""


@dataclass(slots=True, frozen=True, kw_only=True)
class ServiceRegistration[T]:
    """Immutable record of a registered service."""

    implementation: type[T] | None = None
    factory: Callable[[Any], T] | None = None


def _type_name(type_hint: Any) -> str:
    if type_hint is None or type_hint is NoneType:
        return "None"
    if isinstance(type_hint, type):
        return type_hint.__name__
    if get_origin(type_hint) in (Union, UnionType):
        return " | ".join(_type_name(arg) for arg in get_args(type_hint))
    return str(type_hint).replace("typing.", "")


class Container:
    """A small dependency injection container holding one instance per service.

    Constructor parameters are resolved from their type hints. Parameters
    typed ``X | None`` resolve to None when ``X`` is not registered, and
    parameters with defaults fall back to them.
    """

    __slots__ = ("_injection_plans", "_instances", "_lock", "_registry")

    def __init__(self) -> None:
        self._registry: dict[type[Any], ServiceRegistration[Any]] = {}
        self._instances: dict[type[Any], Any] = {}
        self._lock = threading.RLock()
        self._injection_plans: dict[type[Any], InjectionPlan] = {}

    def register[T](
        self,
        interface: type[T],
        implementation: type[T] | None = None,
        *,
        factory: Callable[[Self], T] | None = None,
    ) -> None:
        """Register a dependency.

        1. Self-binding: ``register(PlaylistStore)``
        2. Implementation binding: ``register(AudioEngineProtocol, InMemoryAudioEngine)``
        3. Factory binding: ``register(SleepTimer, factory=lambda c: SleepTimer(0.5))``
        """
        if implementation and factory:
            raise RegistrationError("Cannot provide both implementation and factory.")

        if implementation is None and factory is None:
            implementation = interface

        if implementation and not inspect.isclass(implementation):
            raise RegistrationError(
                f"Implementation must be a class, got {type(implementation)}"
            )
        with self._lock:
            self._registry[interface] = ServiceRegistration(
                implementation=implementation,
                factory=factory,
            )

    def register_instance[T](self, interface: type[T], instance: T) -> None:
        """Bind an already built object as a singleton."""
        with self._lock:
            self._registry[interface] = ServiceRegistration(factory=lambda _: instance)
            self._instances[interface] = instance

    def resolve[T](self, interface: type[T]) -> T:
        """Resolve a dependency, building its own dependencies first."""
        return self._resolve(interface, [])

    def _resolve[T](self, interface: type[T], stack: list[type[Any]]) -> T:
        is_optional, actual = self._unwrap_optional(interface)
        if actual in stack:
            chain = " -> ".join(_type_name(t) for t in [*stack, actual])
            raise CircularDependencyError(f"Circular dependency detected: {chain}")

        with self._lock:
            if actual in self._instances:
                return self._instances[actual]

            registration = self._registry.get(actual)
            if registration is None:
                if is_optional:
                    return None  # pyright: ignore[reportReturnType]
                logger.debug("Dependency not found: %s", _type_name(actual))
                raise DependencyNotFoundError(
                    f"Service - {_type_name(actual)} not registered."
                )

            stack.append(actual)
            try:
                if registration.factory:
                    instance = registration.factory(self)
                else:
                    assert registration.implementation is not None
                    instance = self._inject(registration.implementation, stack)
            finally:
                stack.pop()

            self._instances[actual] = instance
            return instance

    def _unwrap_optional(self, interface: type[Any]) -> tuple[bool, type[Any]]:
        """Return (is_optional, inner type) for ``T | None``; other unions stay as-is."""
        if get_origin(interface) not in (Union, UnionType):
            return False, interface
        args = get_args(interface)
        non_none = [arg for arg in args if arg is not NoneType]
        if NoneType in args and len(non_none) == 1:
            return True, non_none[0]
        return False, interface

    def _inject[T](self, implementation: type[T], stack: list[type[Any]]) -> T:
        plan = self._injection_plans.get(implementation)
        if plan is None:
            plan = self._analyze(implementation)

        signature = inspect.signature(implementation.__init__)
        kwargs: dict[str, Any] = {}
        for name, dep_type in plan.items():
            try:
                kwargs[name] = self._resolve(dep_type, stack)
            except DependencyNotFoundError:
                default = signature.parameters[name].default
                if default is inspect.Parameter.empty:
                    raise
                kwargs[name] = default
        return implementation(**kwargs)

    def _analyze(self, implementation: type[Any]) -> InjectionPlan:
        """Introspect ``__init__`` once and cache the parameter types."""
        try:
            hints = get_type_hints(implementation.__init__)
        except Exception:
            hints = {}

        plan: InjectionPlan = {}
        for name, param in inspect.signature(implementation.__init__).parameters.items():
            if name == "self" or param.kind in (
                inspect.Parameter.VAR_POSITIONAL,
                inspect.Parameter.VAR_KEYWORD,
            ):
                continue
            dep_type = hints.get(name, param.annotation)
            if dep_type is not inspect.Parameter.empty:
                plan[name] = dep_type

        self._injection_plans[implementation] = plan
        return plan

    def close(self) -> None:
        """Dispose singletons in reverse creation order."""
        with self._lock:
            for instance in reversed(list(self._instances.values())):
                closer = getattr(instance, "close", None) or getattr(
                    instance, "dispose", None
                )
                if callable(closer):
                    try:
                        closer()
                    except Exception:
                        logger.exception("Error closing %s", type(instance).__name__)
            self._instances.clear()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: Any, exc_value: Any, traceback: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        with self._lock:
            names = [_type_name(t) for t in self._registry]
            return f"Container(services={len(names)}, registered={names})"

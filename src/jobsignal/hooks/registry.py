"""Hook registry for framework integrations.

A hook knows how to detect its host framework and how to install
instrumentation into it. Hooks register by name and are installed in
one pass by ``load_hooks``; each hook installs at most once.

Example:
    >>> @register_hook("my_framework")
    ... class MyFrameworkHook(Hook):
    ...     def dependencies_present(self) -> bool:
    ...         return self.host is not None
    ...     def install(self) -> None:
    ...         self.host.add_middleware(...)
    >>> load_hooks(host=my_host)

Tags:
    jobsignal, hooks, registry, integration-discovery

Doc-Types:
    api-reference
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, ClassVar

from jobsignal.core.errors import HookError
from jobsignal.core.logging import get_logger
from jobsignal.core.settings import get_settings

logger = get_logger(__name__)

# Global hook registry
_registry: dict[str, type[Hook]] = {}


class Hook(ABC):
    """Base class for framework integrations."""

    name: ClassVar[str] = ""

    def __init__(self, **options: Any):
        self.options = options
        self.installed = False
        self.install_error: BaseException | None = None

    @abstractmethod
    def dependencies_present(self) -> bool:
        """Whether the host framework is available."""
        ...

    @abstractmethod
    def install(self) -> None:
        """Wire the instrumentation into the host framework."""
        ...

    def try_to_install(self) -> bool:
        """Install if possible. Failures are logged, never raised."""
        if self.installed:
            return True
        if not self.dependencies_present():
            logger.debug("hook_skipped", hook=self.name, reason="dependencies missing")
            return False
        try:
            self.install()
        except Exception as exc:
            self.install_error = exc
            logger.error(
                "hook_install_failed",
                hook=self.name,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return False
        self.installed = True
        logger.debug("hook_installed", hook=self.name)
        return True


def register_hook(name: str) -> Callable[[type[Hook]], type[Hook]]:
    """Decorator to register a hook class."""

    def decorator(cls: type[Hook]) -> type[Hook]:
        if name in _registry and _registry[name] is not cls:
            raise HookError(f"Hook '{name}' is already registered")
        cls.name = name
        _registry[name] = cls
        logger.debug("hook_registered", name=name, cls=cls.__name__)
        return cls

    return decorator


def get_hook(name: str) -> type[Hook]:
    """Get a hook class by name."""
    if name not in _registry:
        available = ", ".join(sorted(_registry)) or "none"
        raise HookError(f"Hook '{name}' not found. Available: {available}")
    return _registry[name]


def list_hooks() -> list[str]:
    """List all registered hook names."""
    return sorted(_registry)


def load_hooks(**options: Any) -> dict[str, Hook]:
    """Instantiate every registered hook with ``options`` and try to install it.

    Returns the hooks that were installed, by name. Nothing is installed
    when instrumentation is switched off in settings.
    """
    if not get_settings().active:
        logger.info("hooks_not_loaded", reason="instrumentation inactive")
        return {}

    installed: dict[str, Hook] = {}
    for name in list_hooks():
        hook = _registry[name](**options)
        if hook.try_to_install():
            installed[name] = hook
    return installed


def clear_hooks() -> None:
    """Clear registry (for testing)."""
    _registry.clear()

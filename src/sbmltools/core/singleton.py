"""Provide the singleton meta class used by the global configuration."""

from typing import Dict


class Singleton(type):
    """Meta class whose classes have exactly one instance."""

    _instances: Dict[type, object] = {}

    def __call__(cls, *args, **kwargs):
        """Return the shared instance, creating it on the first call."""
        try:
            return Singleton._instances[cls]
        except KeyError:
            instance = super().__call__(*args, **kwargs)
            Singleton._instances[cls] = instance
            return instance

    def reset(cls) -> None:
        """Forget the shared instance, the next call creates a fresh one."""
        Singleton._instances.pop(cls, None)

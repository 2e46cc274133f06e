"""Decorator that registers destination adapters by provider."""

from typing import Callable, Dict, Type, TypeVar

from remotesync.core.exceptions import ProviderNotFoundException
from remotesync.core.shared_models import ProviderKind

T = TypeVar("T", bound=type)

_REGISTRY: Dict[ProviderKind, type] = {}


def destination(
    name: str,
    short_name: str,
    provider: ProviderKind,
    supports_create: bool = False,
    requires_revision: bool = False,
) -> Callable[[T], T]:
    """Class decorator for destination adapters.

    Args:
        name: Display name of the remote store
        short_name: Identifier used in logs
        provider: Provider kind the adapter serves
        supports_create: Whether absent resources are created before the write
        requires_revision: Whether writes to existing resources need a revision token
    """

    def decorator(cls: T) -> T:
        cls._name = name
        cls._short_name = short_name
        cls._provider = provider
        cls._supports_create = supports_create
        cls._requires_revision = requires_revision
        _REGISTRY[provider] = cls
        return cls

    return decorator


def get_destination_class(provider) -> Type:
    """Look up the adapter class registered for a provider.

    Args:
        provider: ProviderKind or its string value

    Raises:
        ProviderNotFoundException: If the provider is unknown or has no adapter
    """
    # Adapters register on import
    import remotesync.platform.destinations  # noqa: F401

    try:
        kind = ProviderKind(provider)
    except ValueError:
        raise ProviderNotFoundException(str(provider)) from None
    if kind not in _REGISTRY:
        raise ProviderNotFoundException(kind.value)
    return _REGISTRY[kind]

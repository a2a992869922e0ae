"""Resolver registry — map resolver names to factories."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from gemrepo_packager.exceptions import ConfigurationError
from gemrepo_packager.resolver.base import DependencyResolver

if TYPE_CHECKING:
    from gemrepo_packager.config import PackagerConfig

logger = logging.getLogger(__name__)

ResolverFactory = Callable[["PackagerConfig"], DependencyResolver]

RESOLVER_REGISTRY: dict[str, ResolverFactory] = {}


def register_resolver(name: str, factory: ResolverFactory) -> None:
    """Register a resolver factory under *name*."""
    RESOLVER_REGISTRY[name] = factory
    logger.debug("Registered resolver: %s", name)


def create_resolver(config: PackagerConfig) -> DependencyResolver:
    """Build the resolver named by ``config.resolver``."""
    factory = RESOLVER_REGISTRY.get(config.resolver)
    if factory is None:
        raise ConfigurationError(
            f"Unknown resolver '{config.resolver}'. "
            f"Available: {', '.join(sorted(RESOLVER_REGISTRY)) or '(none)'}"
        )
    return factory(config)

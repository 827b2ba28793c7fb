"""
Runtime introspection backends.

This module provides the capability interface used by discovery and
aggregation, its implementations, and a factory selecting one from
configuration.
"""

from ..models.config import IntrospectionConfig
from .base import IntrospectionError, NullIntrospector, RuntimeIntrospector
from .jolokia import JolokiaIntrospector


def create_introspector(config: IntrospectionConfig) -> RuntimeIntrospector:
    """
    Create the runtime introspector named by the configuration.

    Args:
        config: Validated introspection settings

    Returns:
        A RuntimeIntrospector instance

    Raises:
        ValueError: If the backend name is unknown
    """
    backend = config.backend.lower()
    if backend == "jolokia":
        return JolokiaIntrospector(
            timeout=config.timeout_seconds,
            default_port=config.default_port,
        )
    if backend == "none":
        return NullIntrospector()
    raise ValueError(f"Unknown introspection backend: {config.backend}")


__all__ = [
    "IntrospectionError",
    "JolokiaIntrospector",
    "NullIntrospector",
    "RuntimeIntrospector",
    "create_introspector",
]

"""
Defines the runtime-introspection capability interface.

This module provides:
- IntrospectionError: raised by backends when runtime metrics cannot be fetched.
- RuntimeIntrospector: the abstract base class every backend implements.
- NullIntrospector: a backend that never attaches, used when introspection
  is disabled.

The aggregator treats a backend as a black box: handle resolution happens
once per process during discovery, and every fetch may fail independently.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import psutil

from ..models.server import RuntimeMetrics

logger = logging.getLogger(__name__)


class IntrospectionError(Exception):
    """Runtime metrics could not be fetched from a process."""


class RuntimeIntrospector(ABC):
    """
    Abstract base class for runtime-introspection backends.

    Subclasses decide how a running server process is reached (a management
    agent, a debug port, a sidecar) and how its tick timing and memory
    counters are read.
    """

    @abstractmethod
    def resolve_handle(self, process: psutil.Process) -> Optional[str]:
        """
        Work out how to reach a process.

        Args:
            process: A process that passed discovery filtering.

        Returns:
            An opaque handle for fetch(), or None if the process cannot be
            introspected with this backend.
        """

    @abstractmethod
    def fetch(self, handle: str) -> RuntimeMetrics:
        """
        Read runtime metrics through a handle returned by resolve_handle().

        Raises:
            IntrospectionError: If the metrics cannot be read.
        """


class NullIntrospector(RuntimeIntrospector):
    """Backend for disabled introspection: no process ever gets a handle."""

    def resolve_handle(self, process: psutil.Process) -> Optional[str]:
        return None

    def fetch(self, handle: str) -> RuntimeMetrics:
        raise IntrospectionError("runtime introspection is disabled")

"""Shared type aliases used across perch modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Capability callback: a resource method with a per-capability signature
Callback: TypeAlias = Callable[..., Any]

# Lifecycle hook: a zero-argument sync or async callable
Hook: TypeAlias = Callable[[], Any]

"""Resolve ``"module:attribute"`` strings to a servable App.

The attribute may be an ``App``, a bare ``Registry`` (served by a default
``App`` over it), or a zero-argument factory returning either.
"""

import importlib
from typing import Any

from perch.app import App
from perch.routing.registry import Registry


def resolve_app(import_string: str) -> App:
    """Resolve an import string to a perch App instance.

    When the attribute portion is omitted it defaults to ``"app"``
    (``"myapp"`` resolves to ``myapp.app``).

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
            The message lists the module's App and Registry attributes.
        TypeError: If the target is neither an App nor a Registry, or a
            factory raised.
    """
    module_path, _, attr_name = import_string.partition(":")
    if not attr_name:
        attr_name = "app"

    module = importlib.import_module(module_path)
    try:
        obj = getattr(module, attr_name)
    except AttributeError:
        candidates = _servable_names(module)
        hint = f"; found {', '.join(candidates)}" if candidates else ""
        msg = f"module {module_path!r} has no attribute {attr_name!r}{hint}"
        raise AttributeError(msg) from None

    if callable(obj) and not isinstance(obj, App | Registry):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if isinstance(obj, Registry):
        return App(registry=obj)
    if not isinstance(obj, App):
        msg = (
            f"{import_string!r} resolved to {type(obj).__name__}, "
            "not a perch.App or perch.Registry"
        )
        raise TypeError(msg)
    return obj


def _servable_names(module: Any) -> list[str]:
    return sorted(
        name
        for name, value in vars(module).items()
        if not name.startswith("_") and isinstance(value, App | Registry)
    )

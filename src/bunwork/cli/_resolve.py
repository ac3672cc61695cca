"""App import resolution — resolves ``"module:attribute"`` strings to Bunwork apps.

Shared by ``bunwork run`` and ``bunwork routes``.
"""

import importlib

from bunwork.app import Bunwork


def resolve_app(import_string: str) -> Bunwork:
    """Resolve an import string to a Bunwork instance.

    Accepts ``"module:attribute"``; the attribute defaults to ``"app"``.
    A callable that is not a Bunwork is treated as an app factory and
    called with no arguments.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is not a Bunwork app.
    """
    module_path, _, attr_name = import_string.partition(":")
    if not attr_name:
        attr_name = "app"

    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name)

    if callable(obj) and not isinstance(obj, Bunwork):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, Bunwork):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a bunwork.Bunwork instance"
        raise TypeError(msg)

    return obj

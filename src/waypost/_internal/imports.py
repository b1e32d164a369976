"""Import-string resolution — ``"module:attribute"`` to a Python object.

Shared by handler references (``"app.controllers.PostController@show"``)
and middleware references (``"app.middleware:require_login"``).
"""

import importlib
from typing import Any


def import_string(import_path: str) -> Any:
    """Resolve an import string to the object it names.

    Accepts ``"module:attribute"`` and the dotted ``"module.Attribute"``
    form. Nested attributes are allowed after the colon
    (``"module:Class.attr"``).

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        ValueError: If the string names a module but no attribute.
    """
    if ":" in import_path:
        module_path, _, attr_path = import_path.partition(":")
    else:
        module_path, _, attr_path = import_path.rpartition(".")

    if not module_path or not attr_path:
        msg = f"{import_path!r} is not an import string (expected 'module:attribute')"
        raise ValueError(msg)

    obj: Any = importlib.import_module(module_path)
    for part in attr_path.split("."):
        obj = getattr(obj, part)
    return obj

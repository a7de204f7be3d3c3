"""
Input-oracle registry. Adapters register themselves with @register_oracle("name");
callers obtain instances through choose_oracle() and list names with available_oracles().
Every adapter module in this directory is imported below so that registration occurs.
"""

import importlib
import os
import pkgutil

_REGISTRY = {}


def register_oracle(name):
    """
    Decorator to register an oracle class under a given name.
    Usage:
        @register_oracle("console")
        class ConsoleOracle(InputOracle): ...
    """
    def decorator(cls):
        if name in _REGISTRY and _REGISTRY[name] is not cls:
            raise ValueError(f"Oracle name already registered: {name}")
        _REGISTRY[name] = cls
        return cls
    return decorator


def available_oracles(selectable_only=False):
    """
    Registered oracle names, sorted.
    Args:
        selectable_only (bool): Only adapters that can be built from the command line without arguments.
    """
    return sorted(n for n, cls in _REGISTRY.items()
                  if not selectable_only or getattr(cls, "selectable", True))


def choose_oracle(name, **kwargs):
    """
    Instantiate a registered oracle by name (case-insensitive).
    Raises:
        ValueError: If the name is unknown.
    """
    cls = _REGISTRY.get(name.lower())
    if cls is None:
        raise ValueError(f"Unknown oracle: {name} (known: {', '.join(available_oracles())})")
    return cls(**kwargs)


for _, _modname, _ispkg in pkgutil.iter_modules([os.path.dirname(__file__)]):
    if not _ispkg and _modname != "base":
        importlib.import_module(f"{__name__}.{_modname}")

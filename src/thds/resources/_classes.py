"""Looking up `package.module.ClassName` against a specific search path,
without touching sys.path.

Python has a single, process-wide module namespace (sys.modules), so a module
that is already imported is shared by every resolver - much like parent-first
delegation in other runtimes. Only modules that are not yet imported are
looked for under the given search path.
"""
import importlib
import importlib.machinery
import importlib.util
import inspect
import sys
import typing as ty
from types import ModuleType

from .errors import ClassLinkError


def split_class_name(name: str) -> ty.Tuple[str, str]:
    """Accepts both `pkg.mod.Class` and `pkg.mod:Class`."""
    if ":" in name:
        module_name, _, attr = name.partition(":")
    else:
        module_name, _, attr = name.rpartition(".")
    return module_name, attr


def _is_missing(exc: ModuleNotFoundError, module_name: str) -> bool:
    """True if the module itself (or one of its parents) is missing, as
    opposed to something the module imports while initializing.
    """
    missing = exc.name or ""
    return missing == module_name or module_name.startswith(missing + ".")


def _class_from(module: ModuleType, attr: str) -> ty.Optional[type]:
    obj = module
    for part in attr.split("."):  # nested classes
        obj = getattr(obj, part, None)
        if obj is None:
            return None
    return obj if inspect.isclass(obj) else None


def _exec_new_module(class_name: str, spec: importlib.machinery.ModuleSpec) -> ModuleType:
    module = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = module
    if spec.loader is not None:  # None for a namespace package; nothing to execute
        try:
            spec.loader.exec_module(module)
        except Exception as err:
            del sys.modules[spec.name]
            raise ClassLinkError(class_name, err) from err
    parent, _, child = spec.name.rpartition(".")
    if parent:
        setattr(sys.modules[parent], child, module)
    return module


def _import_under(
    class_name: str, module_name: str, search_path: ty.List[str]
) -> ty.Optional[ModuleType]:
    path: ty.Optional[ty.List[str]] = search_path
    module = None
    parts = module_name.split(".")
    for i in range(len(parts)):
        fullname = ".".join(parts[: i + 1])
        module = sys.modules.get(fullname)
        if module is None:
            if path is None:
                return None  # parent is a plain module, not a package
            spec = importlib.machinery.PathFinder.find_spec(fullname, path)
            if spec is None or (spec.loader is None and not spec.submodule_search_locations):
                return None
            module = _exec_new_module(class_name, spec)
        path = list(getattr(module, "__path__", None) or []) or None
    return module


def load_class_under(name: str, search_path: ty.Sequence[str]) -> ty.Optional[type]:
    """Returns None if the class is not found under the search path.

    Raises ClassLinkError if its module is found but fails to import.
    """
    module_name, attr = split_class_name(name)
    if not module_name or not attr:
        return None
    module = _import_under(name, module_name, list(search_path))
    return _class_from(module, attr) if module is not None else None


def import_class(name: str) -> ty.Optional[type]:
    """Uses the regular import system (i.e., sys.path and any installed finders)."""
    module_name, attr = split_class_name(name)
    if not module_name or not attr:
        return None
    try:
        module = importlib.import_module(module_name)
    except ModuleNotFoundError as mnf:
        if _is_missing(mnf, module_name):
            return None
        raise ClassLinkError(name, mnf) from mnf
    except Exception as err:
        raise ClassLinkError(name, err) from err
    return _class_from(module, attr)

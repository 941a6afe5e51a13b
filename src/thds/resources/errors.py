import typing as ty


class ResourceNotFoundError(FileNotFoundError):
    """No resolver in the chain could locate the named resource."""

    def __init__(self, name: str):
        super().__init__(f"Could not find resource {name}")
        self.name = name


class ClassNotFoundError(ImportError):
    def __init__(self, name: str):
        super().__init__(f"Cannot find class: {name}", name=name)


class ClassLinkError(ImportError):
    """A resolver located the module for a class but could not import it.

    Not the same as not finding it: the chain stops here rather than trying
    the next resolver.
    """

    def __init__(self, name: str, reason: ty.Optional[BaseException] = None):
        super().__init__(f"Found but could not initialize class {name}: {reason!r}", name=name)


class PropertiesDecodeError(ValueError):
    def __init__(self, msg: str, source: str = "", lineno: int = 0):
        where = f"{source or '<properties>'}:{lineno}" if lineno else (source or "<properties>")
        super().__init__(f"{where}: {msg}")
        self.source = source
        self.lineno = lineno


class UrlConnectionError(OSError):
    def __init__(self, url: str, reason: ty.Optional[BaseException] = None):
        super().__init__(f"Could not open URL {url}: {reason}")
        self.url = url


def is_resource_not_found(exc: Exception) -> bool:
    return isinstance(exc, ResourceNotFoundError)

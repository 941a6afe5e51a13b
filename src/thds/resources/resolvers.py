"""The things that actually know where resources live.

A Resolver is deliberately dumb: given a resource name, it either produces
the thing or returns None. It never raises for 'not here', and it knows
nothing about any other Resolver. Ordering, retries, and turning absence
into an error are all the job of the chain and the facade.
"""
import base64
import importlib.resources
import io
import os
import sys
import typing as ty
import zipfile
from pathlib import Path

from typing_extensions import Protocol

from thds.core import log

from ._classes import import_class, load_class_under

logger = log.getLogger(__name__)
StrOrPath = ty.Union[str, os.PathLike]
ARCHIVE_URL_PREFIX = "zip:"
ARCHIVE_SEP = "!/"


class Resolver(Protocol):
    """A minimal interface that can be supported by almost any place that holds
    named blobs of bytes - a directory, an archive, a Python package, a dict.

    Names are `/`-separated. An implementation may choose to index names with or
    without a leading `/`; the chain will try both forms.
    """

    def open_stream(self, __name: str) -> ty.Optional[ty.IO[bytes]]:
        """Return a fresh binary stream, owned by the caller, or None if absent."""

    def find_url(self, __name: str) -> ty.Optional[str]:
        """Return a URL string for the resource, or None if absent."""

    def load_class(self, __name: str) -> ty.Optional[type]:
        """Return the class named by `package.module.ClassName`, or None if absent.

        Must raise (not return None) if the module was found but could not be imported.
        """


def _relative_parts(name: str) -> ty.Optional[ty.List[str]]:
    """Absolute names, and names that would escape the root, are never found."""
    if not name or name.startswith("/"):
        return None
    parts = [part for part in name.split("/") if part not in ("", ".")]
    if not parts or ".." in parts:
        return None
    return parts


class DirectoryResolver(Resolver):
    def __init__(self, root: StrOrPath):
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"DirectoryResolver({str(self.root)!r})"

    def _path(self, name: str) -> ty.Optional[Path]:
        parts = _relative_parts(name)
        return self.root.joinpath(*parts) if parts else None

    def open_stream(self, name: str) -> ty.Optional[ty.IO[bytes]]:
        path = self._path(name)
        if path is None or not path.is_file():
            return None
        return path.open("rb")

    def find_url(self, name: str) -> ty.Optional[str]:
        path = self._path(name)
        if path is None or not path.exists():
            return None
        return path.resolve().as_uri()

    def load_class(self, name: str) -> ty.Optional[type]:
        return load_class_under(name, [str(self.root)])


def archive_url(archive: StrOrPath, member: str) -> str:
    return f"{ARCHIVE_URL_PREFIX}{Path(archive).resolve().as_uri()}{ARCHIVE_SEP}{member}"


class ZipResolver(Resolver):
    """Member names are matched exactly as stored in the archive, which
    (for any well-formed archive) means without a leading slash.
    """

    def __init__(self, archive: StrOrPath):
        self.archive = Path(archive)

    def __repr__(self) -> str:
        return f"ZipResolver({str(self.archive)!r})"

    @staticmethod
    def _member(zf: zipfile.ZipFile, name: str) -> ty.Optional[zipfile.ZipInfo]:
        try:
            info = zf.getinfo(name)
        except KeyError:
            return None
        return None if info.is_dir() else info

    def open_stream(self, name: str) -> ty.Optional[ty.IO[bytes]]:
        if not self.archive.is_file():
            return None
        zf = zipfile.ZipFile(self.archive)
        try:
            info = self._member(zf, name)
            return zf.open(info) if info else None
        finally:
            zf.close()
            # an open member keeps the underlying archive file open until the member itself is closed.

    def find_url(self, name: str) -> ty.Optional[str]:
        if not self.archive.is_file():
            return None
        with zipfile.ZipFile(self.archive) as zf:
            if name not in zf.NameToInfo:
                return None
        return archive_url(self.archive, name)

    def load_class(self, name: str) -> ty.Optional[type]:
        return load_class_under(name, [str(self.archive)])


def _as_bytes(data: ty.Union[bytes, str]) -> bytes:
    return data.encode() if isinstance(data, str) else data


def data_url(data: bytes, media_type: str = "application/octet-stream") -> str:
    return f"data:{media_type};base64,{base64.b64encode(data).decode()}"


class MappingResolver(Resolver):
    """In-memory resources. Keys are matched literally - `/a/b` and `a/b` are
    different keys, which is exactly what the chain's separator retry is for.

    str values are utf-8 encoded.
    """

    def __init__(self, resources: ty.Optional[ty.Mapping[str, ty.Union[bytes, str]]] = None):
        self.resources: ty.Dict[str, ty.Union[bytes, str]] = dict(resources or {})

    def __repr__(self) -> str:
        return f"MappingResolver(<{len(self.resources)} resources>)"

    def open_stream(self, name: str) -> ty.Optional[ty.IO[bytes]]:
        data = self.resources.get(name)
        return None if data is None else io.BytesIO(_as_bytes(data))

    def find_url(self, name: str) -> ty.Optional[str]:
        data = self.resources.get(name)
        return None if data is None else data_url(_as_bytes(data))

    def load_class(self, name: str) -> ty.Optional[type]:
        return None


class PackageResolver(Resolver):
    """Resources shipped inside an importable package, via importlib.resources.

    Names are relative to the package directory.
    """

    def __init__(self, package: str):
        self.package = package

    def __repr__(self) -> str:
        return f"PackageResolver({self.package!r})"

    def _traversable(self, name: str):
        parts = _relative_parts(name)
        if not parts:
            return None
        try:
            node = importlib.resources.files(self.package)
        except (ModuleNotFoundError, TypeError):
            # TypeError: a plain module rather than a package
            return None
        for part in parts:
            node = node.joinpath(part)
        return node if node.is_file() else None

    def open_stream(self, name: str) -> ty.Optional[ty.IO[bytes]]:
        node = self._traversable(name)
        return node.open("rb") if node is not None else None

    def find_url(self, name: str) -> ty.Optional[str]:
        node = self._traversable(name)
        if node is None:
            return None
        if isinstance(node, Path):
            return node.resolve().as_uri()
        if isinstance(node, zipfile.Path):
            return archive_url(node.root.filename or "", node.at)
        logger.debug("No URL form for %s in package %s", node, self.package)
        return None

    def load_class(self, name: str) -> ty.Optional[type]:
        if not name.startswith(self.package + "."):
            return None
        return import_class(name)


def _resolver_for_entry(entry: StrOrPath) -> ty.Optional[Resolver]:
    path = Path(entry or os.getcwd())  # an empty sys.path entry means the current directory
    if path.is_dir():
        return DirectoryResolver(path)
    if path.is_file() and zipfile.is_zipfile(path):
        return ZipResolver(path)
    return None


def resolver_for_path(path: StrOrPath) -> Resolver:
    """A directory or an archive."""
    resolver = _resolver_for_entry(path)
    if resolver is None:
        raise ValueError(f"'{path}' is neither a directory nor a zip archive")
    return resolver


class SysPathResolver(Resolver):
    """Searches each directory or archive on a path list, in order.

    With no explicit entries, this is the platform resolver: it reads
    `sys.path` at the time of each lookup, and resolves classes through the
    regular import system.
    """

    def __init__(self, entries: ty.Optional[ty.Sequence[StrOrPath]] = None):
        self._entries = None if entries is None else [os.fspath(e) for e in entries]

    def __repr__(self) -> str:
        return "SysPathResolver()" if self._entries is None else f"SysPathResolver({self._entries!r})"

    def entries(self) -> ty.List[str]:
        return list(sys.path) if self._entries is None else list(self._entries)

    def _resolvers(self) -> ty.Iterator[Resolver]:
        for entry in self.entries():
            resolver = _resolver_for_entry(entry)
            if resolver:
                yield resolver

    def open_stream(self, name: str) -> ty.Optional[ty.IO[bytes]]:
        for resolver in self._resolvers():
            stream = resolver.open_stream(name)
            if stream is not None:
                return stream
        return None

    def find_url(self, name: str) -> ty.Optional[str]:
        for resolver in self._resolvers():
            url = resolver.find_url(name)
            if url is not None:
                return url
        return None

    def load_class(self, name: str) -> ty.Optional[type]:
        if self._entries is None:
            return import_class(name)
        return load_class_under(name, self._entries)

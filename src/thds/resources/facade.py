"""The public surface. Everything here either returns the thing you asked for
or raises one of the errors in `thds.resources.errors` - it never hands back None.

Streams and readers you get back are yours to close. Anything that reads a
stream on your behalf (get_properties, get_bytes, ...) closes it before returning
or raising.
"""
import io
import os
import typing as ty
from pathlib import Path

from thds.core import log

from . import conf, properties, urls
from .chain import DEFAULT_CHAIN
from .errors import ClassNotFoundError, ResourceNotFoundError
from .resolvers import Resolver

logger = log.getLogger(__name__)

__all__ = [
    "ambient_resolver",
    "default_resolver",
    "get_bytes",
    "get_default_resolver",
    "get_file",
    "get_properties",
    "get_reader",
    "get_stream",
    "get_text",
    "get_text_charset",
    "get_url",
    "get_url_properties",
    "get_url_reader",
    "get_url_stream",
    "load_class",
    "set_default_resolver",
    "set_text_charset",
    "text_charset",
]


def get_default_resolver() -> ty.Optional[Resolver]:
    return conf.DEFAULT_RESOLVER()


def set_default_resolver(resolver: ty.Union[Resolver, str, os.PathLike, None]) -> None:
    """Process-wide and unsynchronized - set it before you go concurrent.
    For a thread-local override, use `default_resolver`.

    A str or path names a directory or zip archive.
    """
    conf.set_default_resolver(resolver)


def get_text_charset() -> ty.Optional[str]:
    return conf.TEXT_CHARSET()


def set_text_charset(charset: ty.Optional[str]) -> None:
    """None restores the platform default. Raises LookupError for an unknown codec."""
    conf.set_text_charset(charset)


ambient_resolver = conf.ambient_resolver
default_resolver = conf.default_resolver
text_charset = conf.text_charset


def get_url(name: str, loader: ty.Optional[Resolver] = None) -> str:
    """Resources inside a zip archive come back as `zip:file:///archive.zip!/member`,
    which identifies them but cannot be passed to `get_url_stream`.
    """
    url = DEFAULT_CHAIN.resolve_url(name, loader)
    if url is None:
        raise ResourceNotFoundError(name)
    return url


def get_stream(name: str, loader: ty.Optional[Resolver] = None) -> ty.IO[bytes]:
    stream = DEFAULT_CHAIN.resolve_stream(name, loader)
    if stream is None:
        raise ResourceNotFoundError(name)
    return stream


def _decode_properties(stream: ty.IO[bytes], source: str) -> ty.Dict[str, str]:
    with stream:
        try:
            return properties.load(stream, source=source)
        except ValueError:
            logger.warning("Unable to decode %s as properties", source)
            raise


def _text_reader(stream: ty.IO[bytes]) -> ty.TextIO:
    try:
        return io.TextIOWrapper(stream, encoding=conf.TEXT_CHARSET())  # type: ignore
    except Exception:
        stream.close()
        raise


def get_properties(name: str, loader: ty.Optional[Resolver] = None) -> ty.Dict[str, str]:
    return _decode_properties(get_stream(name, loader), name)


def get_reader(name: str, loader: ty.Optional[Resolver] = None) -> ty.TextIO:
    """Closing the reader closes the underlying stream."""
    return _text_reader(get_stream(name, loader))


def get_bytes(name: str, loader: ty.Optional[Resolver] = None) -> bytes:
    with get_stream(name, loader) as stream:
        return stream.read()


def get_text(name: str, loader: ty.Optional[Resolver] = None) -> str:
    with get_reader(name, loader) as reader:
        return reader.read()


def get_file(name: str, loader: ty.Optional[Resolver] = None) -> Path:
    """Only a real file when the resource lives directly on the local filesystem.
    Resources inside archives or in memory come back as a Path that won't exist.
    """
    return urls.path_from_url(get_url(name, loader))


def get_url_stream(url: str) -> ty.IO[bytes]:
    return urls.open_url(url)


def get_url_reader(url: str) -> ty.TextIO:
    return _text_reader(get_url_stream(url))


def get_url_properties(url: str) -> ty.Dict[str, str]:
    return _decode_properties(get_url_stream(url), url)


def load_class(name: str, loader: ty.Optional[Resolver] = None) -> type:
    """`package.module.ClassName` or `package.module:ClassName`."""
    cls = DEFAULT_CHAIN.resolve_class(name, loader)
    if cls is None:
        raise ClassNotFoundError(name)
    return cls

"""Process-wide defaults for resource resolution.

Both items are plain `thds.core.config` items, so they can be set globally
(`set_global`, unsynchronized - do it at startup, before concurrent use),
locally to the current thread (`set_local`), or from the environment at import.
"""
import codecs
import os
import typing as ty

from thds.core import config
from thds.core.stack_context import StackContext

from .resolvers import Resolver, SysPathResolver, resolver_for_path


def _parse_resolver(value: ty.Any) -> ty.Optional[Resolver]:
    # strings come from the environment, and name a directory or an archive.
    if value is None or value == "":
        return None
    if isinstance(value, (str, os.PathLike)):
        return resolver_for_path(value)
    return value


def _parse_charset(value: ty.Any) -> ty.Optional[str]:
    if not value:
        return None
    if isinstance(value, codecs.CodecInfo):
        return value.name
    return codecs.lookup(value).name  # LookupError for unknown encodings


DEFAULT_RESOLVER = config.item(
    "thds.resources.default_resolver", default=SysPathResolver(), parse=_parse_resolver
)
# consulted after an explicitly-passed resolver, before everything else.

TEXT_CHARSET = config.item("thds.resources.text_charset", default=None, parse=_parse_charset)
# None means the platform default (locale.getpreferredencoding) - same as open().

AMBIENT_RESOLVER: StackContext[ty.Optional[Resolver]] = StackContext(
    "thds.resources.ambient_resolver", None
)
# the current thread's resolver. Like all StackContexts, not inherited by threads you spawn.


def ambient_resolver(resolver: ty.Optional[Resolver]) -> ty.ContextManager[ty.Optional[Resolver]]:
    return AMBIENT_RESOLVER.set(resolver)


# ConfigItem.set_global and set_local store what they are given, so parse here.
def set_default_resolver(resolver: ty.Union[Resolver, str, os.PathLike, None]) -> None:
    DEFAULT_RESOLVER.set_global(_parse_resolver(resolver))


def default_resolver(
    resolver: ty.Union[Resolver, str, os.PathLike, None]
) -> ty.ContextManager[ty.Optional[Resolver]]:
    """Overrides the default resolver for the current thread only."""
    return DEFAULT_RESOLVER.set_local(_parse_resolver(resolver))


def set_text_charset(charset: ty.Optional[str]) -> None:
    TEXT_CHARSET.set_global(_parse_charset(charset))


def text_charset(charset: ty.Optional[str]) -> ty.ContextManager[ty.Optional[str]]:
    return TEXT_CHARSET.set_local(_parse_charset(charset))

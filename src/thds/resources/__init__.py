"""Classpath-style resource lookup: find a named resource through an ordered chain
of Resolvers, and read it as bytes, text, properties, a URL, or a local file.
"""
from thds.core import meta

from . import chain, conf, entities, errors, properties, resolvers, urls  # noqa: F401
from .chain import DEFAULT_CHAIN, LoaderChain  # noqa: F401
from .errors import (  # noqa: F401
    ClassLinkError,
    ClassNotFoundError,
    PropertiesDecodeError,
    ResourceNotFoundError,
    UrlConnectionError,
)
from .facade import *  # noqa: F401,F403
from .resolvers import (  # noqa: F401
    DirectoryResolver,
    MappingResolver,
    PackageResolver,
    Resolver,
    SysPathResolver,
    ZipResolver,
    resolver_for_path,
)

__version__ = meta.get_version(__name__)
__basepackage__ = __name__

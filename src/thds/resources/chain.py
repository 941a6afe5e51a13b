"""An ordered chain of Resolvers, consulted first-match-wins.

The order encodes trust:

1. a Resolver passed explicitly to the call
2. the configured default (conf.DEFAULT_RESOLVER)
3. the ambient Resolver for the current thread (conf.AMBIENT_RESOLVER)
4. the sys.path entry this library itself was imported from
5. all of sys.path

The list is snapshotted once at the start of each call, so reconfiguring the
default from another thread never changes which Resolvers an in-flight lookup
consults. Absence is never an error here; the facade decides that.
"""
import typing as ty
from pathlib import Path

from thds.core import log

from . import conf
from .resolvers import Resolver, SysPathResolver

logger = log.getLogger(__name__)
R = ty.TypeVar("R")

_OWN_ROOT = Path(__file__).resolve().parents[2]
# src/thds/resources/chain.py -> src, or site-packages once installed.
OWN_RESOLVER = SysPathResolver([_OWN_ROOT])
SYSTEM_RESOLVER = SysPathResolver()


def alternate_form(name: str) -> str:
    """Some Resolvers index names with a leading separator, some without."""
    return name[1:] if name.startswith("/") else "/" + name


class LoaderChain:
    def __init__(
        self,
        own: ty.Optional[Resolver] = OWN_RESOLVER,
        system: ty.Optional[Resolver] = SYSTEM_RESOLVER,
    ):
        self.own = own
        self.system = system

    def resolvers(self, explicit: ty.Optional[Resolver] = None) -> ty.Tuple[Resolver, ...]:
        candidates = (explicit, conf.DEFAULT_RESOLVER(), conf.AMBIENT_RESOLVER(), self.own, self.system)
        return tuple(r for r in candidates if r is not None)

    def _first(
        self,
        kind: str,
        name: str,
        explicit: ty.Optional[Resolver],
        attempt: ty.Callable[[Resolver, str], ty.Optional[R]],
        retry_alternate: bool = True,
    ) -> ty.Optional[R]:
        resolvers = self.resolvers(explicit)
        forms = (name, alternate_form(name)) if retry_alternate else (name,)
        for resolver in resolvers:
            for form in forms:
                found = attempt(resolver, form)
                if found is not None:
                    logger.debug("Resolved %s '%s' via %s", kind, form, resolver)
                    return found
        logger.debug("No %s '%s' in any of %d resolvers", kind, name, len(resolvers))
        return None

    def resolve_stream(
        self, name: str, explicit: ty.Optional[Resolver] = None
    ) -> ty.Optional[ty.IO[bytes]]:
        return self._first("stream", name, explicit, lambda r, n: r.open_stream(n))

    def resolve_url(self, name: str, explicit: ty.Optional[Resolver] = None) -> ty.Optional[str]:
        return self._first("URL", name, explicit, lambda r, n: r.find_url(n))

    def resolve_class(self, name: str, explicit: ty.Optional[Resolver] = None) -> ty.Optional[type]:
        """A Resolver that finds the module but cannot import it raises ClassLinkError,
        which stops the chain rather than falling through to the next Resolver.
        """
        return self._first("class", name, explicit, lambda r, n: r.load_class(n), retry_alternate=False)


DEFAULT_CHAIN = LoaderChain()

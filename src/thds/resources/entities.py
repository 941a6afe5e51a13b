"""Serve well-known DTDs from local resources instead of the network.

Hand a LocalDtdResolver to `xml.sax` parser's `setEntityResolver`, and any
DOCTYPE whose system id mentions one of the known DTD file names will be
read from the resource chain. Anything unknown, or any known DTD that
can't be found locally, falls back to the declared location.
"""
import typing as ty
from xml.sax.handler import EntityResolver
from xml.sax.xmlreader import InputSource

from thds.core import log

from . import facade
from .resolvers import Resolver

logger = log.getLogger(__name__)


class LocalDtdResolver(EntityResolver):
    def __init__(self, dtds: ty.Mapping[str, str], loader: ty.Optional[Resolver] = None):
        """`dtds` maps a DTD file name (e.g. 'app-config.dtd') to the resource name to serve for it.

        Matching is case-insensitive, and in mapping order.
        """
        self.dtds = {system_name.lower(): resource for system_name, resource in dtds.items()}
        self.loader = loader

    def resource_for(self, system_id: ty.Optional[str]) -> ty.Optional[str]:
        if not system_id:
            return None
        lower_system_id = system_id.lower()
        for system_name, resource in self.dtds.items():
            if system_name in lower_system_id:
                return resource
        return None

    def resolveEntity(self, publicId: ty.Optional[str], systemId: str):
        resource = self.resource_for(systemId)
        if resource is None:
            return systemId
        try:
            stream = facade.get_stream(resource, self.loader)
        except Exception:
            logger.debug("No local copy of %s; using its declared location", systemId, exc_info=True)
            return systemId
        source = InputSource(systemId)
        source.setPublicId(publicId)
        source.setByteStream(stream)
        return source

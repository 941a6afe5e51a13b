import typing as ty
import urllib.error
import urllib.parse
import urllib.request
from pathlib import Path

from thds.core import log

from .errors import UrlConnectionError

logger = log.getLogger(__name__)


def open_url(url: str) -> ty.IO[bytes]:
    """Whatever urllib supports (file, http, https, ftp, data) - nothing more.

    The caller owns (and must close) the returned stream.
    """
    try:
        return urllib.request.urlopen(url)
    except (urllib.error.URLError, OSError, ValueError) as err:
        # ValueError is what urllib gives you for a string that isn't a URL at all.
        logger.debug("Could not open %s", url, exc_info=True)
        raise UrlConnectionError(url, err) from err


def path_from_url(url: str) -> Path:
    """Only a real, existing file when the URL is a file: URL. For anything else
    (e.g. a member of an archive) you get the URL's path component as a Path,
    which may not exist on this filesystem at all.
    """
    parsed = urllib.parse.urlparse(url)
    if parsed.scheme == "file":
        return Path(urllib.request.url2pathname(parsed.path))
    return Path(urllib.parse.unquote(parsed.path))

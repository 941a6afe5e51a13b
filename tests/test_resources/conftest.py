import io
import typing as ty
import uuid
import zipfile
from pathlib import Path

import pytest

from thds.resources import conf
from thds.resources.resolvers import MappingResolver


class TrackedStream(io.BytesIO):
    def __init__(self, data: bytes):
        super().__init__(data)
        self.close_calls = 0

    def close(self) -> None:
        self.close_calls += 1
        super().close()


class TrackingResolver(MappingResolver):
    """Remembers every stream it hands out, so tests can check who closed what."""

    def __init__(self, resources: ty.Mapping[str, ty.Union[bytes, str]]):
        super().__init__(resources)
        self.opened: ty.List[TrackedStream] = []

    def open_stream(self, name: str) -> ty.Optional[ty.IO[bytes]]:
        data = self.resources.get(name)
        if data is None:
            return None
        stream = TrackedStream(data.encode() if isinstance(data, str) else data)
        self.opened.append(stream)
        return stream


@pytest.fixture(autouse=True)
def isolated_config() -> ty.Iterator[None]:
    # the out-of-the-box default searches sys.path, which we don't want deciding our tests.
    default_resolver, text_charset = conf.DEFAULT_RESOLVER(), conf.TEXT_CHARSET()
    conf.DEFAULT_RESOLVER.set_global(None)
    conf.TEXT_CHARSET.set_global(None)
    yield
    conf.DEFAULT_RESOLVER.set_global(default_resolver)
    conf.TEXT_CHARSET.set_global(text_charset)


@pytest.fixture
def tracking_resolver() -> ty.Type[TrackingResolver]:
    return TrackingResolver


@pytest.fixture
def write_tree(tmp_path: Path) -> ty.Callable[[ty.Mapping[str, ty.Union[str, bytes]]], Path]:
    """Writes {relative name: content} under a fresh directory and returns it."""

    def _write_tree(files: ty.Mapping[str, ty.Union[str, bytes]]) -> Path:
        root = tmp_path / ("tree-" + uuid.uuid4().hex)
        for name, content in files.items():
            path = root / name
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(content)
        root.mkdir(exist_ok=True)
        return root

    return _write_tree


@pytest.fixture
def write_zip(tmp_path: Path) -> ty.Callable[[ty.Mapping[str, ty.Union[str, bytes]]], Path]:
    def _write_zip(files: ty.Mapping[str, ty.Union[str, bytes]]) -> Path:
        archive = tmp_path / ("archive-" + uuid.uuid4().hex + ".zip")
        with zipfile.ZipFile(archive, "w") as zf:
            for name, content in files.items():
                zf.writestr(name, content)
        return archive

    return _write_zip


@pytest.fixture
def unique_module_name() -> str:
    return "resmod_" + uuid.uuid4().hex

import sys
import urllib.request
from pathlib import Path

import pytest

from thds.resources.resolvers import (
    DirectoryResolver,
    MappingResolver,
    PackageResolver,
    SysPathResolver,
    ZipResolver,
    resolver_for_path,
)


def test_directory_resolver(write_tree):
    root = write_tree({"conf/app.properties": "k=v", "top.txt": "top"})
    resolver = DirectoryResolver(root)

    with resolver.open_stream("conf/app.properties") as f:  # type: ignore
        assert f.read() == b"k=v"
    assert resolver.find_url("top.txt") == (root / "top.txt").resolve().as_uri()
    assert resolver.open_stream("conf/nope.properties") is None
    assert resolver.find_url("nope") is None


def test_directory_resolver_only_serves_files_under_its_root(write_tree):
    root = write_tree({"inside/a.txt": "a"})
    (root.parent / "outside.txt").write_text("secret")
    resolver = DirectoryResolver(root / "inside")

    assert resolver.open_stream("../outside.txt") is None
    assert resolver.open_stream("/a.txt") is None  # absolute names are never under the root
    assert resolver.open_stream("") is None
    stream = resolver.open_stream("a.txt")
    assert stream is not None
    stream.close()


def test_directory_resolver_has_urls_but_no_streams_for_directories(write_tree):
    root = write_tree({"d/a.txt": "a"})
    resolver = DirectoryResolver(root)
    assert resolver.open_stream("d") is None
    assert resolver.find_url("d") == (root / "d").resolve().as_uri()


def test_zip_resolver(write_zip):
    archive = write_zip({"conf/app.properties": "k=v"})
    resolver = ZipResolver(archive)

    stream = resolver.open_stream("conf/app.properties")
    assert stream is not None
    with stream:
        # the archive itself was closed when open_stream returned.
        assert stream.read() == b"k=v"

    assert resolver.open_stream("/conf/app.properties") is None
    assert resolver.open_stream("conf") is None
    assert resolver.open_stream("nope") is None

    url = resolver.find_url("conf/app.properties")
    assert url == "zip:" + archive.resolve().as_uri() + "!/conf/app.properties"
    assert resolver.find_url("nope") is None


def test_zip_resolver_for_missing_archive_finds_nothing(tmp_path: Path):
    resolver = ZipResolver(tmp_path / "never-written.zip")
    assert resolver.open_stream("a") is None
    assert resolver.find_url("a") is None


def test_mapping_resolver_matches_keys_literally():
    resolver = MappingResolver({"/a/b": b"slashed", "text": "café"})
    assert resolver.open_stream("a/b") is None
    assert resolver.open_stream("/a/b").read() == b"slashed"  # type: ignore
    assert resolver.open_stream("text").read() == "café".encode()  # type: ignore
    assert resolver.load_class("collections.OrderedDict") is None


def test_mapping_resolver_urls_are_openable_data_urls():
    url = MappingResolver({"blob": b"\x00\x01binary"}).find_url("blob")
    assert url is not None and url.startswith("data:")
    with urllib.request.urlopen(url) as f:
        assert f.read() == b"\x00\x01binary"


def test_package_resolver(tmp_path: Path, monkeypatch, unique_module_name: str):
    package_dir = tmp_path / unique_module_name
    (package_dir / "data").mkdir(parents=True)
    (package_dir / "__init__.py").write_text("")
    (package_dir / "data" / "defaults.properties").write_text("a=1")
    (package_dir / "things.py").write_text("class Thing:\n    pass\n")
    monkeypatch.syspath_prepend(str(tmp_path))

    resolver = PackageResolver(unique_module_name)
    with resolver.open_stream("data/defaults.properties") as f:  # type: ignore
        assert f.read() == b"a=1"
    assert resolver.find_url("data/defaults.properties") == (
        (package_dir / "data" / "defaults.properties").resolve().as_uri()
    )
    assert resolver.open_stream("data") is None
    assert resolver.open_stream("../elsewhere") is None
    assert resolver.load_class(f"{unique_module_name}.things.Thing").__name__ == "Thing"  # type: ignore
    assert resolver.load_class("collections.OrderedDict") is None


def test_package_resolver_for_unknown_package_finds_nothing():
    assert PackageResolver("definitely_not_installed_pkg_abc").open_stream("x") is None


def test_sys_path_resolver_with_explicit_entries_searches_in_order(write_tree, write_zip):
    first = write_tree({"shared.txt": "dir"})
    second = write_zip({"shared.txt": "zip", "zip-only.txt": "z"})
    resolver = SysPathResolver([first, second, first / "does-not-exist"])

    with resolver.open_stream("shared.txt") as f:  # type: ignore
        assert f.read() == b"dir"
    with resolver.open_stream("zip-only.txt") as f:  # type: ignore
        assert f.read() == b"z"
    assert resolver.find_url("zip-only.txt").startswith("zip:file:")  # type: ignore
    assert resolver.open_stream("none.txt") is None


def test_sys_path_resolver_reads_sys_path_live(write_tree, monkeypatch):
    resolver = SysPathResolver()
    assert resolver.open_stream("live-resource.txt") is None

    root = write_tree({"live-resource.txt": "found"})
    monkeypatch.syspath_prepend(str(root))
    assert str(root) in sys.path
    with resolver.open_stream("live-resource.txt") as f:  # type: ignore
        assert f.read() == b"found"


def test_resolver_for_path(write_tree, write_zip, tmp_path: Path):
    assert isinstance(resolver_for_path(write_tree({"a": "a"})), DirectoryResolver)
    assert isinstance(resolver_for_path(write_zip({"a": "a"})), ZipResolver)
    not_an_archive = tmp_path / "plain.txt"
    not_an_archive.write_text("hello")
    with pytest.raises(ValueError):
        resolver_for_path(not_an_archive)

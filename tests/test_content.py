import logging
from pathlib import Path

import panflute as pf
import pytest

from orgsite import content
from orgsite.content import SourceLoader, load_model, refresh
from orgsite.model import ModelStore
from orgsite.pandoc import ParseError


def create_content(tmp_path: Path) -> Path:
    root = tmp_path / "content"
    (root / "posts" / "2021").mkdir(parents=True)
    (root / "assets").mkdir()
    (root / "images").mkdir()
    (root / "_drafts").mkdir()
    (root / "posts" / "hello.org").write_text("* Hello\n", encoding="utf-8")
    (root / "posts" / "2021" / "old.org").write_text("* Old\n", encoding="utf-8")
    (root / "cv.org").write_text("* CV\n", encoding="utf-8")
    (root / "assets" / "notes.org").write_text("* Static\n", encoding="utf-8")
    (root / "images" / "a.png").write_bytes(b"png")
    (root / "_drafts" / "draft.org").write_text("* Draft\n", encoding="utf-8")
    (root / ".hidden.org").write_text("* Hidden\n", encoding="utf-8")
    (root / "readme.md").write_text("# Not org\n", encoding="utf-8")
    return root


def fake_parse(path, reader=None):
    return pf.Doc(pf.Para(pf.Str(path.stem)))


def test_loader_discovers_sources(tmp_path):
    root = create_content(tmp_path)
    loader = SourceLoader(root)
    ids = [loader.post_id(path) for path in loader.iter_files()]
    assert ids == ["cv.org", "posts/2021/old.org", "posts/hello.org"]


def test_loader_missing_directory(tmp_path):
    assert SourceLoader(tmp_path / "nope").iter_files() == []


def test_loader_other_extension(tmp_path):
    root = create_content(tmp_path)
    loader = SourceLoader(root, source_ext=".md")
    assert [loader.post_id(p) for p in loader.iter_files()] == ["readme.md"]


def test_load_model(tmp_path, monkeypatch):
    root = create_content(tmp_path)
    monkeypatch.setattr(content, "parse_file", fake_parse)
    model = load_model(root)
    assert model.keys() == ["cv.org", "posts/2021/old.org", "posts/hello.org"]
    assert pf.stringify(model.lookup("posts/hello.org")).strip() == "hello"


def test_load_model_skips_unparseable(tmp_path, monkeypatch, caplog):
    root = create_content(tmp_path)

    def parse(path, reader=None):
        if path.name == "old.org":
            raise ParseError(path, "unexpected end of input")
        return fake_parse(path)

    monkeypatch.setattr(content, "parse_file", parse)
    with caplog.at_level(logging.WARNING, logger="orgsite.content"):
        model = load_model(root)
    assert "posts/2021/old.org" not in model
    assert "posts/hello.org" in model
    assert "unexpected end of input" in caplog.text


def test_refresh_updates_and_removes(tmp_path, monkeypatch):
    root = create_content(tmp_path)
    monkeypatch.setattr(content, "parse_file", fake_parse)
    loader = SourceLoader(root)
    store = ModelStore(load_model(root))

    new_post = root / "posts" / "new.org"
    new_post.write_text("* New\n", encoding="utf-8")
    model = refresh(store, loader, new_post)
    assert "posts/new.org" in model
    assert store.snapshot() is model

    new_post.unlink()
    model = refresh(store, loader, new_post)
    assert "posts/new.org" not in model


def test_refresh_parse_error_leaves_store(tmp_path, monkeypatch):
    root = create_content(tmp_path)
    loader = SourceLoader(root)
    store = ModelStore()

    def parse(path, reader=None):
        raise ParseError(path, "bad")

    monkeypatch.setattr(content, "parse_file", parse)
    with pytest.raises(ParseError):
        refresh(store, loader, root / "posts" / "hello.org")
    assert store.snapshot().keys() == []


def test_load_model_parses_org(requires_pandoc, tmp_path):
    root = create_content(tmp_path)
    model = load_model(root)
    doc = model.lookup("posts/hello.org")
    assert isinstance(doc.content[0], pf.Header)
    assert pf.stringify(doc.content[0]).strip() == "Hello"


def test_refresh_ignores_non_sources(tmp_path, monkeypatch):
    root = create_content(tmp_path)
    monkeypatch.setattr(content, "parse_file", fake_parse)
    store = ModelStore()
    before = store.snapshot()
    assert refresh(store, SourceLoader(root), root / "images" / "a.png") is before
    assert refresh(store, SourceLoader(root), root / "assets" / "notes.org") is before


def test_refresh_ignores_files_outside_content_dir(tmp_path, monkeypatch):
    root = create_content(tmp_path)
    (tmp_path / "notes.org").write_text("* Notes\n", encoding="utf-8")
    monkeypatch.setattr(content, "parse_file", fake_parse)
    store = ModelStore()
    before = store.snapshot()
    loader = SourceLoader(root)
    assert not loader.is_source(tmp_path / "notes.org")
    assert refresh(store, loader, tmp_path / "notes.org") is before

"""Tests for the engine facade."""

from pathlib import Path

import pytest

from md_interlinker.config import InterlinkConfig
from md_interlinker.engine import WikilinkEngine
from md_interlinker.errors import UnresolvedResolverError
from md_interlinker.extractor import extract_links
from md_interlinker.pages import PageIndex, load_document
from md_interlinker.state import DeadLinks, LinkCache

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def site(tmp_path):
    """A small content tree with two notes and an image."""
    (tmp_path / "blog").mkdir()
    (tmp_path / "hello-world.md").write_text("---\ntitle: Hello World\n---\n<p>Hello body</p>")
    (tmp_path / "blog" / "a-blog-post.md").write_text(
        "---\ntitle: Blog Post\naliases: [bp]\n---\nLinks to [[hello-world]]."
    )
    (tmp_path / "blog" / "cat.png").write_bytes(b"\x89PNG")
    return tmp_path


@pytest.fixture
def page_index(site):
    return PageIndex.from_documents(
        load_document(path, site) for path in [site / "hello-world.md", site / "blog" / "a-blog-post.md"]
    )


@pytest.fixture
def engine(site):
    return WikilinkEngine(InterlinkConfig(content_root=site))


class TestFind:
    def test_aligned_with_extraction(self, engine, page_index):
        document = "See [[hello-world]], ![[cat.png|Cat]] and [[missing]] then [[hello-world]]."

        metas = engine.find(document, page_index, "/blog/a-blog-post")

        assert [m.link for m in metas] == extract_links(document)
        assert [m.exists for m in metas] == [True, True, False, True]
        assert metas[0] is metas[3]

    def test_no_links(self, engine, page_index):
        assert engine.find("plain text", page_index) == []

    def test_records_dead_links(self, engine, page_index):
        engine.find("[[missing]] [[missing]] ![[gone.png]]", page_index)

        assert engine.dead_links.snapshot() == ["[[missing]]", "![[gone.png]]"]

    def test_fatal_error_propagates(self, engine, page_index):
        with pytest.raises(UnresolvedResolverError):
            engine.find("ok [[hello-world]] then [[fail:1234]]", page_index, "/blog/a-blog-post")

    def test_interpret_many(self, engine, page_index):
        metas = engine.interpret_many(["[[bp]]", "[[/hello-world]]"], page_index)

        assert [m.href for m in metas] == ["/blog/a-blog-post/", "/hello-world/"]
        assert metas[0].title == "bp"
        assert metas[1].title == "Hello World"


class TestSharedState:
    def test_engines_share_cache_and_dead_links(self, site, page_index):
        dead_links, link_cache = DeadLinks(), LinkCache()
        config = InterlinkConfig(content_root=site)
        first = WikilinkEngine(config, dead_links, link_cache)
        second = WikilinkEngine(config, dead_links, link_cache)

        a = first.interpret("[[hello-world]]", page_index)
        b = second.interpret("[[hello-world]]", page_index)
        first.interpret("[[missing]]", page_index)
        second.interpret("[[missing]]", page_index)

        assert a is b
        assert len(dead_links) == 1
        assert len(link_cache) == 2

    def test_default_state_is_per_engine(self, site, page_index):
        first = WikilinkEngine(InterlinkConfig(content_root=site))
        second = WikilinkEngine(InterlinkConfig(content_root=site))

        assert first.interpret("[[hello-world]]", page_index) is not second.interpret("[[hello-world]]", page_index)


class TestRender:
    def test_links_and_images(self, engine, page_index):
        html = engine.render("See [[hello-world#intro|Hi]] and ![[cat.png]].", page_index, "/blog/a-blog-post")

        assert html == 'See <a href="/hello-world/#intro">Hi</a> and <img src="/blog/cat.png" alt="cat" />.'

    def test_embed_inlines_document(self, engine, page_index):
        assert engine.render("![[hello-world]]", page_index) == "<p>Hello body</p>"

    def test_dead_links_render_as_stubs(self, engine, page_index):
        html = engine.render("[[missing]] ![[missing]]", page_index)

        assert html == '<a href="/stubs/">missing</a> <a class="dead-link" href="/stubs/">missing</a>'

    def test_custom_resolver(self, site, page_index):
        config = InterlinkConfig(
            content_root=site,
            resolving_fns={"issue": lambda meta: f'<a href="https://example.com/issues/{meta.name}">#{meta.name}</a>'},
        )
        engine = WikilinkEngine(config)

        html = engine.render("Fixed in [[issue:42]].", page_index)

        assert html == 'Fixed in <a href="https://example.com/issues/42">#42</a>.'

    def test_unregistered_strategy_leaves_token(self, site, page_index):
        config = InterlinkConfig(content_root=site, resolving_fns={"issue": lambda meta: "x"})
        engine = WikilinkEngine(config)

        assert engine.render("See [[hello-world]].", page_index) == "See [[hello-world]]."


class TestRenderSkipsCode:
    def test_code_regions_left_verbatim(self, site):
        engine = WikilinkEngine(InterlinkConfig(content_root=site))
        document = "Text\n\n```\n[[in fence]]\n```\n\nand `[[inline]]` but [[prose]]\n"

        html = engine.render(document, PageIndex())

        assert html == (
            "Text\n\n```\n[[in fence]]\n```\n\nand `[[inline]]` but <a href=\"/stubs/\">prose</a>\n"
        )
        assert engine.dead_links.snapshot() == ["[[prose]]"]
        assert "[[in fence]]" not in engine.link_cache

    def test_fixture_document(self, site):
        engine = WikilinkEngine(InterlinkConfig(content_root=site))
        text = (FIXTURES / "within-code.md").read_text(encoding="utf-8")

        html = engine.render(text, PageIndex(), "/links")

        assert "A fenced [[wikilink in code]] and an ![[embed in code]]." in html
        assert "`[[inline wikilink]]`" in html
        assert '<a href="/stubs/">real link</a>' in html
        assert '<a class="dead-link" href="/stubs/">real embed</a>' in html
        assert engine.dead_links.snapshot() == ["[[real link]]", "![[real embed]]", "[[indented block link]]"]
        assert len(engine.dead_links) == 3

"""Turn one raw wikilink token into a WikilinkMeta record."""

import logging
import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Protocol

from md_interlinker.config import InterlinkConfig
from md_interlinker.errors import MissingContextError, UnresolvedResolverError
from md_interlinker.extractor import is_embed
from md_interlinker.images import is_image_name, locate_image
from md_interlinker.pages import Document, LookupResult
from md_interlinker.resolvers import (
    DEFAULT,
    DEFAULT_EMBED,
    DEFAULT_IMAGE,
    DEFAULT_STRATEGIES,
    NOT_FOUND_EMBED,
)
from md_interlinker.state import DeadLinks, LinkCache

logger = logging.getLogger(__name__)

# Trailing .md / .markdown on the link name; stripped so names match file path stems
MARKDOWN_EXTENSION = re.compile(r"\.(md|markdown)\s?$", re.IGNORECASE)

# / escapes the structural characters # and :
ESCAPE = "/"


@dataclass
class WikilinkMeta:
    title: str | None  # explicit |title, else the resolved document's title
    name: str  # normalized identifier
    anchor: str | None  # text after an unescaped #
    link: str  # the raw token
    is_embed: bool
    is_path: bool = False
    exists: bool = False
    resolving_fn_name: str = DEFAULT
    is_image: bool = False
    href: str | None = None
    path: str | None = None
    page: Document | None = None


class PageLookup(Protocol):
    def find_by_link(self, meta: WikilinkMeta) -> LookupResult: ...


def _strip_markdown_extension(name: str) -> str:
    return MARKDOWN_EXTENSION.sub("", name)


def _split_unescaped(value: str, sep: str) -> tuple[str, str] | None:
    """Split on the first sep unless it is escaped; None when escaped or absent."""
    head, found, tail = value.partition(sep)
    if not found or head.endswith(ESCAPE):
        return None
    return head.strip(), tail.strip()


def resolve_relative(name: str, referencing_path: str) -> str:
    """Rewrite ./x or ../x against a root-absolute referencing path.

    /blog/sub-dir/some-page + ../a-blog-post -> /blog/a-blog-post
    """
    cwd = referencing_path.split("/")
    relative = name.split("/")
    steps_back = relative.count("..")
    keep = len(cwd) - (steps_back + 1)
    return "/".join(cwd[: max(keep, 0)] + [part for part in relative if part not in (".", "..")])


class LinkInterpreter:
    """Interprets raw wikilink tokens, memoizing into a shared LinkCache.

    Unresolvable links are recorded in the shared DeadLinks set and given the
    configured stub URL; they never raise.
    """

    def __init__(self, config: InterlinkConfig, dead_links: DeadLinks, link_cache: LinkCache):
        self.config = config
        self.dead_links = dead_links
        self.link_cache = link_cache

    def _record_dead(self, meta: WikilinkMeta, referencing_path: str | None) -> None:
        meta.href = self.config.stub_url
        if self.dead_links.add(meta.link):
            logger.warning("Dead wikilink %s on page [%s]", meta.link, referencing_path)

    def interpret(
        self,
        link: str,
        page_index: PageLookup,
        referencing_path: str | None = None,
    ) -> WikilinkMeta:
        """Interpret one raw token such as ![[name#anchor|title]].

        Args:
            link: Raw token exactly as extracted
            page_index: Collaborator answering find_by_link(meta)
            referencing_path: Root-absolute path stem of the linking document,
                              required for ./ and ../ links

        Raises:
            MissingContextError: relative link without referencing_path
            UnresolvedResolverError: unknown resolver prefix and no document
                                     named by the whole link
        """
        cached = self.link_cache.get(link)
        if cached is not None:
            logger.debug("Cache hit for %s", link)
            return cached

        embed = is_embed(link)
        inner = link[3 if embed else 2 : -2]
        name, has_title, title = inner.partition("|")

        meta = WikilinkMeta(
            title=title.strip() if has_title else None,
            name=_strip_markdown_extension(name.strip()),
            anchor=None,
            link=link,
            is_embed=embed,
            resolving_fn_name=DEFAULT_EMBED if embed else DEFAULT,
        )

        self._split_anchor(meta)
        self._resolve_path(meta, referencing_path)
        self._dispatch_resolver(meta, page_index, referencing_path)

        if is_image_name(meta.name, self.config.image_extensions):
            self._resolve_image(meta, referencing_path)
        else:
            self._resolve_page(meta, page_index, referencing_path)

        return self.link_cache.setdefault(link, meta)

    def _split_anchor(self, meta: WikilinkMeta) -> None:
        if "#" not in meta.name:
            return
        parts = _split_unescaped(meta.name, "#")
        if parts is None:
            meta.name = meta.name.replace(ESCAPE + "#", "#", 1)
            return
        meta.name = _strip_markdown_extension(parts[0])
        meta.anchor = parts[1]

    def _resolve_path(self, meta: WikilinkMeta, referencing_path: str | None) -> None:
        meta.is_path = meta.name.startswith(("/", "./", "../"))
        if not meta.is_path or not meta.name.startswith("."):
            return
        if not referencing_path:
            raise MissingContextError(meta.link)
        meta.name = resolve_relative(meta.name, referencing_path)

    def _dispatch_resolver(
        self, meta: WikilinkMeta, page_index: PageLookup, referencing_path: str | None
    ) -> None:
        if ":" not in meta.name:
            return
        parts = _split_unescaped(meta.name, ":")
        if parts is None:
            meta.name = meta.name.replace(ESCAPE + ":", ":", 1)
            return

        prefix, rest = parts
        if prefix in self.config.resolving_fns:
            meta.resolving_fn_name = prefix
            meta.name = rest
            return

        # Names like "Re: something" may be real documents
        if not page_index.find_by_link(meta).found:
            raise UnresolvedResolverError(prefix, meta.link, referencing_path)

    def _resolve_image(self, meta: WikilinkMeta, referencing_path: str | None) -> None:
        meta.is_image = True
        meta.resolving_fn_name = DEFAULT_IMAGE

        found = locate_image(meta.name, self.config.content_root, referencing_path)
        if found is None:
            self._record_dead(meta, referencing_path)
            meta.resolving_fn_name = NOT_FOUND_EMBED
            return

        meta.exists = True
        meta.href = found.href
        meta.path = str(found.full_path)
        if not meta.title:
            meta.title = PurePosixPath(meta.name).stem

    def _resolve_page(
        self, meta: WikilinkMeta, page_index: PageLookup, referencing_path: str | None
    ) -> None:
        result = page_index.find_by_link(meta)
        page = result.page
        if page is not None:
            if result.found_by_alias:
                meta.title = meta.name
            elif meta.title is None and page.title:
                meta.title = page.title
            meta.href = page.url
            meta.path = page.input_path
            meta.exists = True
            meta.page = page
            logger.debug("Resolved %s to %s", meta.link, page.url)
            return

        if meta.resolving_fn_name in DEFAULT_STRATEGIES:
            self._record_dead(meta, referencing_path)
            if meta.is_embed:
                meta.resolving_fn_name = NOT_FOUND_EMBED

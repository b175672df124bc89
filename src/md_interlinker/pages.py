"""Documents and the page index wikilinks are resolved against."""

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import frontmatter

if TYPE_CHECKING:
    from md_interlinker.interpreter import WikilinkMeta

MARKDOWN_EXTENSIONS = (".md", ".markdown")


@dataclass(frozen=True)
class Document:
    title: str | None  # frontmatter title, falls back to filename without extension
    url: str  # published URL
    input_path: str  # absolute source path
    file_path_stem: str  # root-absolute path without extension, e.g. /blog/post
    file_slug: str  # last segment of file_path_stem
    aliases: tuple[str, ...] = ()  # from YAML frontmatter
    content: str = ""  # body (minus frontmatter)


@dataclass(frozen=True)
class LookupResult:
    page: Document | None
    found: bool
    found_by_alias: bool = False


def slugify(value: str) -> str:
    """Lower-case, drop punctuation, collapse whitespace and dashes to single dashes."""
    value = value.strip().lower()
    value = re.sub(r"[^\w\s-]", "", value)
    value = re.sub(r"[\s_]+", "-", value)
    value = re.sub(r"-+", "-", value)
    return value.strip("-")


def _normalize_list(value: object) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(v) for v in value]
    return []


def _strip_markdown_extension(path: str) -> str:
    for ext in MARKDOWN_EXTENSIONS:
        if path.lower().endswith(ext):
            return path[: -len(ext)]
    return path


def load_document(filepath: Path, content_root: Path, url: str | None = None) -> Document:
    """Load a markdown file into a Document.

    Args:
        filepath: Path to the .md file, inside content_root
        content_root: Root the file path stem is computed from
        url: Published URL; defaults to the file path stem with a trailing slash
    """
    filepath = Path(filepath).resolve()
    content_root = Path(content_root).resolve()

    with open(filepath, encoding="utf-8") as f:
        post = frontmatter.load(f)

    relative = filepath.relative_to(content_root).as_posix()
    file_path_stem = "/" + _strip_markdown_extension(relative)
    file_slug = file_path_stem.rsplit("/", 1)[-1]

    title = post.metadata.get("title")
    if title is None:
        title = file_slug

    return Document(
        title=str(title),
        url=url if url is not None else file_path_stem + "/",
        input_path=str(filepath),
        file_path_stem=file_path_stem,
        file_slug=file_slug,
        aliases=tuple(_normalize_list(post.metadata.get("aliases"))),
        content=post.content,
    )


@dataclass
class PageIndex:
    """Answers "which document does this wikilink name" over a fixed document list.

    Lookup order for a link:
        1. path links match the document's file_path_stem exactly
        2. slug of the link name matches the document's file_slug
        3. slug of the link name matches the slug of the document's title
        4. the link name is one of the document's aliases
    The first document to satisfy any rule wins, in document order.
    """

    documents: list[Document] = field(default_factory=list)
    slugify_fn: Callable[[str], str] = slugify

    @classmethod
    def from_documents(cls, documents: Iterable[Document]) -> "PageIndex":
        return cls(documents=list(documents))

    def find_by_link(self, meta: "WikilinkMeta") -> LookupResult:
        name = meta.name
        if meta.is_path:
            for doc in self.documents:
                if doc.file_path_stem == name:
                    return LookupResult(page=doc, found=True)
            return LookupResult(page=None, found=False)

        slug = self.slugify_fn(name)
        for doc in self.documents:
            # a name of only punctuation slugifies to "" and must not match by slug
            if slug and doc.file_slug == slug:
                return LookupResult(page=doc, found=True)
            if slug and doc.title and self.slugify_fn(doc.title) == slug:
                return LookupResult(page=doc, found=True)
            if name in doc.aliases:
                return LookupResult(page=doc, found=True, found_by_alias=True)
        return LookupResult(page=None, found=False)

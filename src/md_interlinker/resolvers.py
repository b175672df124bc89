"""Render strategies for interpreted wikilinks, keyed by name.

Interpretation only checks whether a name is registered; the host calls the
strategy when it substitutes a link in its output.
"""

import html
import re
from collections.abc import Callable, Iterator
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from md_interlinker.errors import ConfigError

if TYPE_CHECKING:
    from md_interlinker.interpreter import WikilinkMeta

DEFAULT = "default"
DEFAULT_EMBED = "default-embed"
DEFAULT_IMAGE = "default-image"
NOT_FOUND_EMBED = "404-embed"

# Strategies the interpreter treats as "nobody claimed this link"
DEFAULT_STRATEGIES = frozenset({DEFAULT, DEFAULT_EMBED})

RenderFn = Callable[["WikilinkMeta"], str | None]

# Image titles like "300" or "300x200" are sizes, not alt text
IMAGE_SIZE_PATTERN = re.compile(r"^(\d+)(?:x\d+)?$")


def default_link(meta: "WikilinkMeta") -> str:
    text = html.escape(meta.title if meta.title is not None else meta.name)
    if meta.href is None:
        return meta.link
    href = meta.href
    if meta.anchor:
        href = f"{href}#{meta.anchor}"
    return f'<a href="{html.escape(href)}">{text}</a>'


def default_embed(meta: "WikilinkMeta") -> str | None:
    """Inline the embedded document's body. Layouts are the host's business."""
    if not meta.exists or meta.page is None:
        return None
    return meta.page.content


def default_image(meta: "WikilinkMeta") -> str | None:
    if not meta.exists or not meta.is_image or meta.href is None:
        return None

    src = meta.href if meta.href.startswith("/") else "/" + meta.href
    alt = PurePosixPath(meta.name).stem
    width = None

    if meta.title:
        size = IMAGE_SIZE_PATTERN.match(meta.title)
        if size:
            width = size.group(1)
        else:
            alt = meta.title

    tag = f'<img src="{html.escape(src)}" alt="{html.escape(alt)}"'
    if width:
        tag += f' width="{width}px"'
    return tag + " />"


def not_found_embed(meta: "WikilinkMeta") -> str:
    text = html.escape(meta.title if meta.title is not None else meta.name)
    return f'<a class="dead-link" href="{html.escape(meta.href or "")}">{text}</a>'


class ResolverRegistry:
    """Mapping of strategy name -> render function, validated on registration."""

    def __init__(self, fns: dict[str, RenderFn] | None = None):
        self._fns: dict[str, RenderFn] = {}
        for name, fn in (fns or {}).items():
            self.register(name, fn)

    @classmethod
    def with_defaults(cls) -> "ResolverRegistry":
        return cls(
            {
                DEFAULT: default_link,
                DEFAULT_EMBED: default_embed,
                DEFAULT_IMAGE: default_image,
                NOT_FOUND_EMBED: not_found_embed,
            }
        )

    def register(self, name: str, fn: RenderFn) -> None:
        if not isinstance(name, str) or not name.strip():
            raise ConfigError(f"Resolver name must be a non-empty string, got {name!r}")
        if ":" in name:
            raise ConfigError(f"Resolver name {name!r} may not contain ':'")
        if not callable(fn):
            raise ConfigError(f"Resolver {name!r} is not callable")
        self._fns[name] = fn

    def get(self, name: str) -> RenderFn | None:
        return self._fns.get(name)

    def render(self, meta: "WikilinkMeta") -> str | None:
        fn = self._fns.get(meta.resolving_fn_name)
        if fn is None:
            return None
        return fn(meta)

    def __contains__(self, name: object) -> bool:
        return name in self._fns

    def __iter__(self) -> Iterator[str]:
        return iter(self._fns)

    def __len__(self) -> int:
        return len(self._fns)

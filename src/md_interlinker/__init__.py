"""Wikilink interpretation for markdown publishing."""

from md_interlinker.config import InterlinkConfig
from md_interlinker.engine import WikilinkEngine
from md_interlinker.errors import (
    ConfigError,
    InterlinkError,
    MissingContextError,
    UnresolvedResolverError,
)
from md_interlinker.interpreter import LinkInterpreter, WikilinkMeta
from md_interlinker.pages import Document, PageIndex, load_document
from md_interlinker.state import DeadLinks, LinkCache

__all__ = [
    "ConfigError",
    "DeadLinks",
    "Document",
    "InterlinkConfig",
    "InterlinkError",
    "LinkCache",
    "LinkInterpreter",
    "MissingContextError",
    "PageIndex",
    "UnresolvedResolverError",
    "WikilinkEngine",
    "WikilinkMeta",
    "load_document",
]

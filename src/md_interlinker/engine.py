"""Engine facade: extract the wikilinks of a document and interpret each one."""

import logging
from collections.abc import Iterable

from md_interlinker.config import InterlinkConfig
from md_interlinker.extractor import WIKILINK_PATTERN, extract_links, split_code
from md_interlinker.interpreter import LinkInterpreter, PageLookup, WikilinkMeta
from md_interlinker.state import DeadLinks, LinkCache

logger = logging.getLogger(__name__)


class WikilinkEngine:
    """Composes extraction, interpretation and the shared cache/dead-link tables.

    Pass the same DeadLinks and LinkCache to every engine that takes part in
    one build so links are interpreted once and dead links counted once.
    """

    def __init__(
        self,
        config: InterlinkConfig | None = None,
        dead_links: DeadLinks | None = None,
        link_cache: LinkCache | None = None,
    ):
        self.config = config or InterlinkConfig()
        self.dead_links = dead_links if dead_links is not None else DeadLinks()
        self.link_cache = link_cache if link_cache is not None else LinkCache()
        self.interpreter = LinkInterpreter(self.config, self.dead_links, self.link_cache)

    def interpret(
        self, link: str, page_index: PageLookup, referencing_path: str | None = None
    ) -> WikilinkMeta:
        return self.interpreter.interpret(link, page_index, referencing_path)

    def interpret_many(
        self, links: Iterable[str], page_index: PageLookup, referencing_path: str | None = None
    ) -> list[WikilinkMeta]:
        return [self.interpreter.interpret(link, page_index, referencing_path) for link in links]

    def find(
        self, document: str, page_index: PageLookup, referencing_path: str | None = None
    ) -> list[WikilinkMeta]:
        """Interpret every wikilink in document, in document order.

        The result lines up index-for-index with extract_links(document).
        """
        links = extract_links(document)
        logger.debug("Found %d wikilink(s) in [%s]", len(links), referencing_path)
        return self.interpret_many(links, page_index, referencing_path)

    def render(
        self, document: str, page_index: PageLookup, referencing_path: str | None = None
    ) -> str:
        """Replace each wikilink in document with its render strategy's output.

        Links whose strategy is unregistered or renders nothing stay as written,
        as do links inside fenced blocks and inline code.
        """
        resolving_fns = self.config.resolving_fns

        def repl(match) -> str:
            meta = self.interpreter.interpret(match.group(0), page_index, referencing_path)
            rendered = resolving_fns.render(meta)
            return match.group(0) if rendered is None else rendered

        return "".join(
            segment if is_code else WIKILINK_PATTERN.sub(repl, segment)
            for segment, is_code in split_code(document)
        )

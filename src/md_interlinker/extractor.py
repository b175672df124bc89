"""Wikilink extraction: find raw [[...]] and ![[...]] tokens in text."""

import re

# Wikilinks: [[name]], [[name|title]], ![[name]], ![[name|title]]
# The name segment has no | or newline, the title segment no newline.
# A leading ! may not itself follow another ! (no double embeds).
WIKILINK_PATTERN = re.compile(r"(?<!!)!?\[\[[^|\n]+?(?:\|[^\n]+?)?\]\]")

# Code blocks callers strip before extracting links
FENCED_CODE_BLOCK = re.compile(r"```[\s\S]*?```")
INLINE_CODE = re.compile(r"`[^`]+`")
CODE_REGION = re.compile(f"{FENCED_CODE_BLOCK.pattern}|{INLINE_CODE.pattern}")


def strip_code(content: str) -> str:
    """Remove code blocks and inline code to avoid false positives."""
    content = FENCED_CODE_BLOCK.sub("", content)
    content = INLINE_CODE.sub("", content)
    return content


def split_code(content: str) -> list[tuple[str, bool]]:
    """Split content into (segment, is_code) pairs that join back to content.

    Code segments are the fenced blocks and inline code strip_code removes.
    """
    segments = []
    pos = 0
    for match in CODE_REGION.finditer(content):
        if match.start() > pos:
            segments.append((content[pos : match.start()], False))
        segments.append((match.group(0), True))
        pos = match.end()
    if pos < len(content):
        segments.append((content[pos:], False))
    return segments


def extract_links(text: str) -> list[str]:
    """Return every raw wikilink token in document order, duplicates included.

    The extractor does not know about code regions; pass the text through
    strip_code first when those should be ignored.
    """
    return WIKILINK_PATTERN.findall(text)


def is_embed(link: str) -> bool:
    return link.startswith("!")

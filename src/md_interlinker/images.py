"""Image asset lookup under a content root."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageMatch:
    href: str  # root-absolute URL path, e.g. /images/cat.png
    full_path: Path  # file on disk


def is_image_name(name: str, extensions: frozenset[str]) -> bool:
    """Case-insensitive extension check against a set of lower-case extensions."""
    return PurePosixPath(name).suffix.lower() in extensions


def _referencing_dir(content_root: Path, referencing_path: str) -> Path:
    # referencing paths are root-absolute stems like /blog/post
    parent = PurePosixPath(referencing_path).parent
    return content_root / str(parent).lstrip("/")


def _href_for(content_root: Path, full_path: Path) -> str:
    relative = full_path.relative_to(content_root)
    return "/" + relative.as_posix()


def _within(content_root: Path, path: Path) -> Path | None:
    """Collapse . and .. in path without following symlinks; None if it leaves content_root."""
    normalized = Path(os.path.normpath(path))
    if not normalized.is_relative_to(content_root):
        return None
    return normalized


def _search_tree(root: Path, filename: str) -> Path | None:
    """Depth-first walk of root, returning the first file named filename.

    Files in a directory are checked before its subdirectories are entered.
    Directories that cannot be read are skipped.
    """
    stack = [root]
    while stack:
        directory = stack.pop()
        try:
            entries = sorted(directory.iterdir())
        except OSError as e:
            logger.debug("Skipping unreadable directory %s: %s", directory, e)
            continue

        subdirs = []
        for entry in entries:
            try:
                if entry.is_file():
                    if entry.name == filename:
                        return entry
                elif entry.is_dir() and not entry.is_symlink():
                    subdirs.append(entry)
            except OSError:
                continue
        stack.extend(reversed(subdirs))
    return None


def locate_image(
    image_name: str,
    content_root: Path,
    referencing_path: str | None = None,
) -> ImageMatch | None:
    """Find an image file for a wikilink.

    Args:
        image_name: Name as written in the link: /abs/path.png, ./rel.png,
                    ../rel.png or a bare file name
        content_root: Directory the site content lives in
        referencing_path: Root-absolute stem of the linking document
                          (e.g. /blog/post), needed for relative names

    Returns None when the file does not exist.
    """
    content_root = Path(content_root).resolve()

    if image_name.startswith("/"):
        full_path = _within(content_root, content_root / image_name.lstrip("/"))
        if full_path is None or not full_path.is_file():
            return None
        return ImageMatch(href=_href_for(content_root, full_path), full_path=full_path)

    if image_name.startswith(("./", "../")):
        if not referencing_path:
            return None
        full_path = _within(content_root, _referencing_dir(content_root, referencing_path) / image_name)
        if full_path is None or not full_path.is_file():
            return None
        return ImageMatch(href=_href_for(content_root, full_path), full_path=full_path)

    candidates = []
    if referencing_path:
        candidates.append(_referencing_dir(content_root, referencing_path) / image_name)
    candidates.append(content_root / image_name)

    for candidate in candidates:
        candidate = _within(content_root, candidate)
        if candidate is not None and candidate.is_file():
            return ImageMatch(href=_href_for(content_root, candidate), full_path=candidate)

    found = _search_tree(content_root, PurePosixPath(image_name).name)
    if found is None:
        return None
    return ImageMatch(href=_href_for(content_root, found), full_path=found)

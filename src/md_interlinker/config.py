"""Engine configuration."""

import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from md_interlinker.errors import ConfigError
from md_interlinker.resolvers import ResolverRegistry

DEFAULT_STUB_URL = "/stubs/"
DEFAULT_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".svg", ".webp")


def normalize_extensions(extensions: Iterable[str]) -> frozenset[str]:
    """Lower-case extensions and make sure each has a leading dot."""
    normalized = set()
    for ext in extensions:
        ext = ext.strip().lower()
        if not ext:
            continue
        if not ext.startswith("."):
            ext = "." + ext
        normalized.add(ext)
    return frozenset(normalized)


@dataclass
class InterlinkConfig:
    stub_url: str = DEFAULT_STUB_URL  # href for links that resolve to nothing
    image_extensions: frozenset[str] = field(
        default_factory=lambda: normalize_extensions(DEFAULT_IMAGE_EXTENSIONS)
    )
    content_root: Path = field(default_factory=Path.cwd)  # where image files are searched
    resolving_fns: ResolverRegistry = field(default_factory=ResolverRegistry.with_defaults)

    def __post_init__(self) -> None:
        self.image_extensions = normalize_extensions(self.image_extensions)
        self.content_root = Path(self.content_root)
        if isinstance(self.resolving_fns, dict):
            self.resolving_fns = ResolverRegistry(self.resolving_fns)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "InterlinkConfig":
        """Build a config from INTERLINK_* environment variables.

        INTERLINK_STUB_URL: href for dead links
        INTERLINK_IMAGE_EXTENSIONS: comma or colon separated, e.g. ".png,.jpg"
        INTERLINK_CONTENT_ROOT: content directory, ~ is expanded
        """
        env = os.environ if environ is None else environ
        config = cls()

        stub_url = env.get("INTERLINK_STUB_URL", "").strip()
        if stub_url:
            config.stub_url = stub_url

        extensions_env = env.get("INTERLINK_IMAGE_EXTENSIONS", "")
        if extensions_env.strip():
            extensions = normalize_extensions(extensions_env.replace(":", ",").split(","))
            if not extensions:
                raise ConfigError(f"INTERLINK_IMAGE_EXTENSIONS has no extensions: {extensions_env!r}")
            config.image_extensions = extensions

        root_env = env.get("INTERLINK_CONTENT_ROOT", "").strip()
        if root_env:
            root = Path(root_env).expanduser().resolve()
            if not root.is_dir():
                raise ConfigError(f"INTERLINK_CONTENT_ROOT is not a directory: {root}")
            config.content_root = root

        return config

"""Fatal errors raised while interpreting a wikilink.

Dead links are not errors: they are recorded in a DeadLinks set and rendered
as stubs. Only conditions that make a link uninterpretable raise.
"""


class InterlinkError(Exception):
    """Base class for md_interlinker errors."""


class ConfigError(InterlinkError):
    """Invalid configuration value or resolver registration."""


class MissingContextError(InterlinkError):
    """A relative path wikilink was interpreted without a referencing path."""

    def __init__(self, link: str):
        self.link = link
        super().__init__(f"Unable to do relative path lookup of wikilink {link}.")


class UnresolvedResolverError(InterlinkError):
    """A resolver prefix is not registered and no document matches the raw name."""

    def __init__(self, prefix: str, link: str, referencing_path: str | None):
        self.prefix = prefix
        self.link = link
        self.referencing_path = referencing_path
        super().__init__(
            f"Unable to find resolving fn [{prefix}] for wikilink {link} on page [{referencing_path}]"
        )

"""Exception hierarchy for the legal feed pipeline."""


class LexfeedError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(LexfeedError):
    """Configuration or sources file is missing or invalid."""


class SourceFetchError(LexfeedError):
    """A feed, SPARQL endpoint or scraped page could not be fetched."""

    def __init__(self, source: str, message: str) -> None:
        self.source = source
        super().__init__(f"{source}: {message}")


class EnrichmentError(LexfeedError):
    """Base class for classification and summarization failures."""


class LLMCallError(EnrichmentError):
    """The text-generation provider call failed."""


class ResponseParseError(EnrichmentError):
    """The provider response did not contain a usable JSON object."""

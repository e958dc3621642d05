"""Exceptions raised while turning datasheets into PDF files."""


class DatasheetError(Exception):
    """Base class for all datasheet rendering errors."""


class ConfigurationError(DatasheetError):
    """A datasheet cannot be rendered with the current configuration.

    Raised for missing stylesheets or logos of a datasheet type, unresolvable
    build paths and invalid config files. Fatal for the affected datasheet only.
    """


class SourceDocumentError(DatasheetError):
    """The markdown source of a datasheet cannot be read or parsed."""


class RenderError(DatasheetError):
    """A rendering step did not produce the expected artifact."""

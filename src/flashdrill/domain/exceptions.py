class FlashdrillError(Exception):
    """Base class for errors raised by flashdrill."""


class CatalogError(FlashdrillError):
    """The card catalog could not be loaded or failed validation."""

"""Exception types raised by the watermarking core and the logo store."""


class WatermarkError(Exception):
    """Base class for every failure that aborts a watermark request."""


class MissingInputError(WatermarkError, ValueError):
    """A required input (document, logo, identity) is absent or zero-length."""


class DocumentLoadError(WatermarkError):
    """The document bytes are not a readable PDF."""


class EmptyDocumentError(MissingInputError, DocumentLoadError):
    """Zero-length document bytes; catchable as either parent."""


class ImageFormatError(WatermarkError):
    """The watermark bytes cannot be decoded as a PNG image."""


class CompositionError(WatermarkError):
    """Stamping a tile onto a page failed."""


class LogoNotFoundError(WatermarkError):
    """No logo is registered for the submitter."""


class LogoFetchError(WatermarkError):
    """The logo store could not be reached or answered with an error."""

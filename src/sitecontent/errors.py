"""Exception types raised by the site content persistence layer."""


class SiteContentError(Exception):
    """Base class for all sitecontent errors."""


class RemoteStoreError(SiteContentError):
    """The remote store could not be reached or answered with a fault.

    A missing row is not an error; the client returns ``None`` for that.
    """


class ContentFormatError(SiteContentError, ValueError):
    """Serialized content could not be parsed into a document."""

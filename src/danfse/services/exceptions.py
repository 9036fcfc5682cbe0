from __future__ import annotations


class DanfseError(Exception):
    """Base class for errors that abort a DANFSe conversion."""


class ParseError(DanfseError):
    """Input is not well-formed XML or the infNFSe element cannot be located."""


class MissingRequiredFieldError(DanfseError):
    """A mandatory node or attribute (the infNFSe Id) is absent."""

    def __init__(self, message: str, field: str = "") -> None:
        super().__init__(message)
        self.field = field

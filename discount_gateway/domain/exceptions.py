"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class MalformedTermsError(DomainException):
    """Payment terms string does not match a supported grammar"""

    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"Unsupported payment terms: {raw!r}")


class InvalidRateError(DomainException):
    """Annual rate is negative or the rate type is not recognised"""

    pass


class InvalidInvoiceRowError(DomainException):
    """Imported row has a missing or unparseable field"""

    pass


class ImportFileError(DomainException):
    """Uploaded file cannot be read as an invoice CSV"""

    pass

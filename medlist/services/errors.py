# medlist/services/errors.py


class MedListError(RuntimeError):
    pass


class InvalidInputError(MedListError):
    """No usable image in the request."""


class UpstreamError(MedListError):
    """The vision model call failed (network, auth, rate limit, empty reply)."""


class ExtractionError(MedListError):
    """The model reply could not be turned into a medication list."""


class SchemaValidationError(ExtractionError):
    pass

"""Error taxonomy reported to API callers.

Every failure that reaches a caller is one of the ``GeoPostError``
subclasses below; the ``kind`` string is the stable category rendered in
error responses and ``status_code`` is the HTTP status it maps to.
"""


class GeoPostError(Exception):
    kind = "InternalError"
    status_code = 500

    def __init__(self, message: str | None = None):
        super().__init__(message or self.kind)
        self.message = message or self.kind


class InputInvalid(GeoPostError):
    kind = "InputInvalid"
    status_code = 400


class MediaRequired(GeoPostError):
    kind = "MediaRequired"
    status_code = 400


class MediaStoreFailed(GeoPostError):
    kind = "MediaStoreFailed"


class ScoringFailed(GeoPostError):
    kind = "ScoringFailed"


class IndexWriteFailed(GeoPostError):
    kind = "IndexWriteFailed"


class IndexUnavailable(GeoPostError):
    """The search index could not be reached or could not evaluate a request."""

    kind = "IndexUnavailable"


class CredentialInvalid(GeoPostError):
    kind = "CredentialInvalid"
    status_code = 401


class CredentialConflict(GeoPostError):
    kind = "CredentialConflict"
    status_code = 409

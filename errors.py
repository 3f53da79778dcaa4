# errors.py - exception types raised by the handlers and mapped to HTTP responses in app.py


class EnrollmentError(Exception):
    """Base class for errors raised by the enrollment API."""


class ValidationError(EnrollmentError):
    """A required field is missing/falsy or fails a format rule (HTTP 400)."""


class UpstreamError(EnrollmentError):
    """The mutation service failed; callers only ever see a generic 500."""


class AuthError(EnrollmentError):
    """Webhook verification token or mode did not match (HTTP 403)."""


class MalformedWebhookPayload(EnrollmentError):
    """Inbound webhook body does not have the provider's entry/changes/messages shape."""

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.errors = errors or []

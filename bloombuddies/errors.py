class BloomError(Exception):
    """Base class for errors raised by the service layer."""


class UpstreamFailure(BloomError):
    """The candidate store (or another hosted dependency) failed.

    Rendered to clients as a generic server error; the message is for logs only.
    """
    status_code = 500


class LockTimeout(UpstreamFailure):
    status_code = 503


class RecordNotFound(BloomError):
    pass


class MailNotConfigured(BloomError):
    pass


class BookingConflict(BloomError):
    """A self-service change is not allowed in the record's current state."""

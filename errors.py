class TrackerError(ValueError):
    """Base class for failures raised by the workout store."""


class ValidationError(TrackerError):
    """An input field is missing, blank or out of range.

    Raised before any mutation; the store is left untouched.
    """


class NotFoundError(TrackerError):
    """A referenced workout, exercise or template id does not exist."""


class StorageError(TrackerError):
    """The backing file could not be read, parsed or written.

    A file that fails to parse is never replaced with a default store, so
    the caller may need to recover it by hand.
    """

"""Error hierarchy for availability checks.

Scraper failures are split into transient (the export may simply not be
written yet) and permanent (the data itself is unusable) so callers can
tell an operator what went wrong. Storage problems never surface as
exceptions; they are logged by the store and gate.
"""


class SlotwatchError(Exception):
    """Base exception for all slotwatch errors."""

    pass


class ScrapingError(SlotwatchError):
    """Base exception for failures while collecting slots."""

    pass


class TransientError(ScrapingError):
    """Temporary failure that may succeed on the next run.

    Examples: slot export not written yet, file locked by the exporter.
    """

    pass


class PermanentError(ScrapingError):
    """Failure that won't go away by running again.

    Examples: malformed JSON export, slot record missing required fields.
    """

    pass


class NotificationError(SlotwatchError):
    """The notification sink rejected or could not deliver a message.

    Raised by the transport layer only; Notifier.notify catches it and
    falls back to console output.
    """

    pass

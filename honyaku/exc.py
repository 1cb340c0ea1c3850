"""
Honyaku exceptions.

HTTP level failures (no formatter for the ``Accept`` header, no parser for the ``Content-Type``) are
reported with :mod:`werkzeug.exceptions`; the classes here cover programming and configuration errors.
"""


class HonyakuError(Exception):
    """
    Base class for every error raised by Honyaku itself.
    """


class InvalidMediaTypeError(HonyakuError, ValueError):
    """
    Raised when a media type (or an ``Accept`` header) cannot be parsed.

    :ivar value: The offending text.
    """

    def __init__(self, value: str, reason: str = None):
        self.value = value
        self.reason = reason

        msg = "Invalid media type: {!r}".format(value)
        if reason:
            msg = "{} ({})".format(msg, reason)
        super().__init__(msg)


class ConfigurationError(HonyakuError):
    """
    Raised when a module cannot be configured, for example because a module reference does not resolve
    to something with a ``configure`` method.
    """

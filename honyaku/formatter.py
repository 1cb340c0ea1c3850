"""
Body formatters.

A :class:`BodyFormatter` turns a value returned by application code into a response body. Formatters are
selected by :class:`~.BodyConverterSelector` using :meth:`BodyFormatter.can_format` and the media types
listed in :attr:`BodyFormatter.types`.
"""
import abc
import types
import typing

from honyaku.mediatype import MediaType


class _NoClose(object):
    """
    Wraps an output so that formatters can't close it themselves.
    """

    def __init__(self, out):
        self._out = out

    def close(self):
        pass

    @property
    def closed(self) -> bool:
        return self._out.closed

    def __getattr__(self, item):
        return getattr(self._out, item)


class BodyFormatterContext(object):
    """
    The context passed to :meth:`BodyFormatter.format`.

    The outputs are created lazily, so a formatter that never writes never opens one.

    :param charset: The charset used for text output.
    :param locals: Request locals. Only string keys are kept.
    :param stream: A callable returning the binary output.
    :param writer: A callable returning the text output.
    """

    def __init__(self, charset: str, locals: typing.Mapping = None, *,
                 stream: typing.Callable[[], typing.BinaryIO],
                 writer: typing.Callable[[], typing.TextIO]):
        if not charset:
            raise TypeError("A charset is required.")

        if stream is None or writer is None:
            raise TypeError("A stream and a writer are required.")

        self._charset = charset
        self._locals = types.MappingProxyType(
            {k: v for k, v in (locals or {}).items() if isinstance(k, str)}
        )
        self._stream = stream
        self._writer = writer

    @property
    def charset(self) -> str:
        return self._charset

    @property
    def locals(self) -> typing.Mapping[str, typing.Any]:
        return self._locals

    def text(self, fn: typing.Callable[[typing.TextIO], typing.Any]):
        """
        Writes text to the response.

        :param fn: Called with the text output. Calling ``close`` on it does nothing; the output is closed
            once ``fn`` returns. If ``fn`` raises, the output is left open.
        """
        writer = self._writer()
        fn(_NoClose(writer))
        writer.flush()
        writer.close()

    def bytes(self, fn: typing.Callable[[typing.BinaryIO], typing.Any]):
        """
        Writes bytes to the response.

        :param fn: Called with the binary output. Same rules as :meth:`text`.
        """
        out = self._stream()
        fn(_NoClose(out))
        out.flush()
        out.close()


class BodyFormatter(abc.ABC):
    """
    Writes values of some types as some media types.
    """

    @property
    @abc.abstractmethod
    def types(self) -> typing.List[MediaType]:
        """
        :return: The media types this formatter produces, most preferred first.
        """

    @abc.abstractmethod
    def can_format(self, type_: type) -> bool:
        """
        :param type_: The runtime class of the value to format.
        :return: If this formatter is able to format instances of ``type_``.
        """

    @abc.abstractmethod
    def format(self, body: typing.Any, ctx: BodyFormatterContext):
        """
        Formats the body, using either :meth:`BodyFormatterContext.text` or :meth:`BodyFormatterContext.bytes`.

        I/O errors are not handled here; they propagate to the caller.
        """

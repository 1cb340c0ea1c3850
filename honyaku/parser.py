"""
Body parsers.

A :class:`Parser` reads a request body into a value of the requested type.
"""
import abc
import io
import typing

from honyaku.mediatype import MediaType


class ParserContext(object):
    """
    The context passed to :meth:`Parser.parse`.

    :param type_: The content type of the request body.
    :param charset: The charset to decode text with, if the content type doesn't specify one.
    :param body: A callable returning the raw body. It is called at most once.
    """

    def __init__(self, type_: MediaType, charset: str, body: typing.Callable[[], bytes]):
        self.type = type_
        self._charset = charset
        self._body = body
        self._data = None  # type: bytes

    @property
    def charset(self) -> str:
        """
        :return: The charset of the request, preferring the one in the content type.
        """
        return self.type.charset or self._charset

    def bytes(self) -> bytes:
        if self._data is None:
            self._data = self._body()

        return self._data

    def text(self) -> str:
        return self.bytes().decode(self.charset)

    def stream(self) -> typing.BinaryIO:
        return io.BytesIO(self.bytes())


class Parser(abc.ABC):
    """
    Reads request bodies of some media types into values of some types.
    """

    @property
    @abc.abstractmethod
    def types(self) -> typing.List[MediaType]:
        """
        :return: The media types this parser accepts.
        """

    @abc.abstractmethod
    def can_parse(self, type_: type) -> bool:
        """
        :param type_: The type the caller wants back.
        """

    @abc.abstractmethod
    def parse(self, type_: type, ctx: ParserContext) -> typing.Any:
        """
        Parses the body.

        :param type_: The type the caller wants back.
        :param ctx: The :class:`ParserContext` holding the body.
        :return: The parsed value.
        """

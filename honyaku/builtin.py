"""
Built-in formatters and parsers.

These are registered by :class:`~.NegotiationComponent` around the ones contributed by modules: the
parsers and the binary/reader formatters first, :data:`format_any` last so it only catches what nothing
else wants.
"""
import io
import shutil
import typing

from honyaku.formatter import BodyFormatter, BodyFormatterContext
from honyaku.mediatype import ALL, HTML, OCTETSTREAM, MediaType
from honyaku.parser import Parser, ParserContext
from honyaku.view import View


class _OctetStreamFormatter(BodyFormatter):
    @property
    def types(self) -> typing.List[MediaType]:
        return [OCTETSTREAM]


class StreamFormatter(_OctetStreamFormatter):
    """
    Copies binary file objects into the response. The file is always closed.
    """

    def can_format(self, type_: type) -> bool:
        return issubclass(type_, (io.RawIOBase, io.BufferedIOBase))

    def format(self, body: typing.BinaryIO, ctx: BodyFormatterContext):
        with body:
            ctx.bytes(lambda out: shutil.copyfileobj(body, out))

    def __str__(self):
        return "Formatter for: binary streams"


class BytesFormatter(_OctetStreamFormatter):
    def can_format(self, type_: type) -> bool:
        return issubclass(type_, (bytes, bytearray))

    def format(self, body: bytes, ctx: BodyFormatterContext):
        ctx.bytes(lambda out: out.write(body))

    def __str__(self):
        return "Formatter for: bytes"


class MemoryViewFormatter(_OctetStreamFormatter):
    def can_format(self, type_: type) -> bool:
        return issubclass(type_, memoryview)

    def format(self, body: memoryview, ctx: BodyFormatterContext):
        if body.contiguous:
            format_bytes.format(body, ctx)
        else:
            format_bytes.format(body.tobytes(), ctx)

    def __str__(self):
        return "Formatter for: memoryview"


class ReaderFormatter(BodyFormatter):
    """
    Copies text file objects into the response. The file is always closed.
    """

    @property
    def types(self) -> typing.List[MediaType]:
        return [HTML]

    def can_format(self, type_: type) -> bool:
        return issubclass(type_, io.TextIOBase)

    def format(self, body: typing.TextIO, ctx: BodyFormatterContext):
        with body:
            ctx.text(lambda out: shutil.copyfileobj(body, out))

    def __str__(self):
        return "Formatter for: text streams"


class AnyFormatter(BodyFormatter):
    """
    Writes ``str(body)``, for anything but views.
    """

    @property
    def types(self) -> typing.List[MediaType]:
        return [HTML]

    def can_format(self, type_: type) -> bool:
        return not issubclass(type_, View)

    def format(self, body, ctx: BodyFormatterContext):
        ctx.text(lambda out: out.write(str(body)))

    def __str__(self):
        return "Formatter for: str()"


class BytesParser(Parser):
    @property
    def types(self) -> typing.List[MediaType]:
        return [ALL]

    def can_parse(self, type_: type) -> bool:
        return type_ in (bytes, bytearray)

    def parse(self, type_: type, ctx: ParserContext):
        return type_(ctx.bytes())

    def __str__(self):
        return "Parser for: bytes"


class TextParser(Parser):
    @property
    def types(self) -> typing.List[MediaType]:
        return [ALL]

    def can_parse(self, type_: type) -> bool:
        return type_ is str

    def parse(self, type_: type, ctx: ParserContext):
        return ctx.text()

    def __str__(self):
        return "Parser for: str"


format_stream = StreamFormatter()
format_bytes = BytesFormatter()
format_memoryview = MemoryViewFormatter()
format_reader = ReaderFormatter()
format_any = AnyFormatter()

parse_bytes = BytesParser()
parse_text = TextParser()

#: Formatters registered before the ones contributed by modules.
FORMATTERS = (format_stream, format_bytes, format_memoryview, format_reader)

#: Parsers registered before the ones contributed by modules.
PARSERS = (parse_bytes, parse_text)

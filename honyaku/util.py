"""
Misc utilities: configuration helpers, and the glue between werkzeug requests and the selector.
"""
import copy
import io
import logging
import typing

from werkzeug.exceptions import BadRequest, NotAcceptable, UnsupportedMediaType
from werkzeug.wrappers import Request, Response

from honyaku.exc import InvalidMediaTypeError
from honyaku.formatter import BodyFormatter, BodyFormatterContext
from honyaku.mediatype import OCTETSTREAM, MediaType, acceptable
from honyaku.parser import ParserContext
from honyaku.selector import BodyConverterSelector

logger = logging.getLogger("Honyaku")

#: The configuration every module sees, updated with the component's keyword arguments.
DEFAULT_CONFIG = {
    "application": {
        "env": "dev",
        "charset": "utf-8",
        # None means ISO 8601.
        "date_format": None,
        "tz": "UTC",
    },
}


# config utilities
def merge_config(base: dict, override: typing.Mapping) -> dict:
    """
    Merges two configuration dicts. Nested dicts are merged recursively, everything else in ``override`` wins.

    :return: A new dict; neither argument is modified.
    """
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, typing.Mapping) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)

    return merged


def config_value(config: typing.Mapping, path: str, default=None):
    """
    Looks up a dotted path in a configuration dict.

    .. code-block:: python

        tz = config_value(config, "application.tz", "UTC")

    :param config: The configuration.
    :param path: The dotted path to look up.
    :param default: Returned if any part of the path is missing.
    """
    value = config
    for part in path.split("."):
        if not isinstance(value, typing.Mapping) or part not in value:
            return default
        value = value[part]

    return value


# request utilities
def accepted_types(request: Request) -> typing.List[MediaType]:
    """
    :return: The media types accepted by the client, most preferred first.
    :raises werkzeug.exceptions.BadRequest: If the ``Accept`` header can't be parsed.
    """
    try:
        return MediaType.parse(request.headers.get("Accept"))
    except InvalidMediaTypeError as e:
        raise BadRequest(str(e)) from e


def content_type(request: Request) -> MediaType:
    """
    :return: The media type of the request body. Missing headers mean ``application/octet-stream``.
    :raises werkzeug.exceptions.BadRequest: If the ``Content-Type`` header can't be parsed.
    """
    header = request.headers.get("Content-Type")
    if not header:
        return OCTETSTREAM

    try:
        return MediaType.valueof(header)
    except InvalidMediaTypeError as e:
        raise BadRequest(str(e)) from e


class _ResponseBuffer(io.BytesIO):
    """
    A BytesIO that keeps its contents after being closed.
    """
    data = b""

    def close(self):
        if not self.closed:
            self.data = self.getvalue()
        super().close()


def _response_type(formatter: BodyFormatter, accepted: typing.List[MediaType]) -> MediaType:
    for accept, declared in acceptable(accepted, formatter.types):
        if not declared.is_wildcard:
            return declared

        if not accept.is_wildcard:
            return MediaType(accept.type, accept.subtype, {k: v for k, v in accept.params.items() if k != "q"})

    return OCTETSTREAM


def make_response(selector: BodyConverterSelector, request: Request, body, code: int = 200,
                  headers: dict = None, *, locals: typing.Mapping = None, charset: str = "utf-8",
                  response_class: typing.Type[Response] = Response) -> Response:
    """
    Formats a value into a response, using the formatter that best matches the ``Accept`` header.

    This allows Flask-like returns from views:

    .. code-block:: python

        return make_response(selector, request, ({"id": 1}, 201))

    :param selector: The :class:`~.BodyConverterSelector` to pick the formatter with.
    :param request: The request being answered.
    :param body: The value to format. Responses are returned unmodified, tuples are unpacked into
        ``(body, code, headers)``, and None produces a 204 NO CONTENT.
    :param code: The status code of the response.
    :param headers: Any optional headers.
    :param locals: Request locals, passed on to view engines.
    :param charset: The charset for text output, unless the chosen media type carries one.
    :param response_class: The Response class to create.
    :return: A new :class:`werkzeug.wrappers.Response`.
    :raises werkzeug.exceptions.NotAcceptable: If no formatter matches.
    """
    if isinstance(body, Response):
        return body

    if isinstance(body, tuple):
        # We enforce ``tuple`` here instead of any iterable.
        if not 1 <= len(body) <= 3:
            raise TypeError("Cannot return more than 3 arguments from a view")

        if len(body) == 3:
            headers = {**(headers or {}), **body[2]}
        if len(body) >= 2:
            code = body[1]
        body = body[0]

    if body is None:
        return response_class(b"", status=204, headers=headers or {})

    accepted = accepted_types(request)
    formatter = selector.formatter(body, accepted)
    if formatter is None:
        logger.warning("No formatter for {} accepting {}".format(type(body).__name__,
                                                                 ", ".join(map(str, accepted)) or "nothing"))
        raise NotAcceptable()

    mtype = _response_type(formatter, accepted)
    charset = mtype.charset or charset
    if mtype.is_text and mtype.charset is None:
        mtype = mtype.with_params(charset=charset)

    buffer = _ResponseBuffer()
    ctx = BodyFormatterContext(charset, locals,
                               stream=lambda: buffer,
                               writer=lambda: io.TextIOWrapper(buffer, encoding=charset, newline=""))
    formatter.format(body, ctx)

    data = buffer.data if buffer.closed else buffer.getvalue()
    return response_class(data, status=code, headers={"Content-Type": str(mtype), **(headers or {})})


def read_body(selector: BodyConverterSelector, request: Request, type_: type, *, charset: str = "utf-8"):
    """
    Reads the request body as ``type_``, using the parser that matches the ``Content-Type`` header.

    .. code-block:: python

        user = read_body(selector, ctx.request, User)

    :param selector: The :class:`~.BodyConverterSelector` to pick the parser with.
    :param request: The request to read.
    :param type_: The type to read the body as.
    :param charset: The charset to decode text with, unless the content type carries one.
    :return: The parsed body.
    :raises werkzeug.exceptions.UnsupportedMediaType: If no parser matches.
    """
    mtype = content_type(request)
    parser = selector.parser(type_, [mtype])
    if parser is None:
        logger.warning("No parser for {} from {}".format(getattr(type_, "__name__", type_), mtype))
        raise UnsupportedMediaType()

    return parser.parse(type_, ParserContext(mtype, charset, request.get_data))

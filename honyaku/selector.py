"""
Formatter and parser selection.

.. code-block:: python

    selector = BodyConverterSelector([html, json], [])

    assert selector.formatter("hi", [HTML]) is html
    assert selector.formatter({"a": 1}, [JSON]) is json

    # asking for */* produces the first formatter able to handle the value
    assert selector.formatter("hi", [ALL]) is html
"""
import typing

from honyaku.formatter import BodyFormatter
from honyaku.mediatype import MediaType, acceptable
from honyaku.parser import Parser
from honyaku.renderers.base import ViewEngine
from honyaku.view import View


def _first_match(declared: typing.Iterable[MediaType], types: typing.Iterable[MediaType]) -> bool:
    return next(acceptable(types, declared), None) is not None


class BodyConverterSelector(object):
    """
    Picks the first registered formatter or parser able to handle a value and one of a list of media types.

    The registered descriptors are fixed at creation. Ties are broken by registration order only.

    :param formatters: The available formatters, in registration order.
    :param parsers: The available parsers, in registration order.
    """

    def __init__(self, formatters: typing.Iterable[BodyFormatter], parsers: typing.Iterable[Parser] = ()):
        if formatters is None:
            raise TypeError("The formatters are required.")

        self.formatters = tuple(formatters)
        self.parsers = tuple(parsers or ())

    def formatter(self, message, types: typing.Iterable[MediaType]) -> typing.Optional[BodyFormatter]:
        """
        Selects a formatter for a value.

        Views are only handed to the engine they name, if they name one.

        :param message: The value to format.
        :param types: The acceptable media types, most preferred first.
        :return: The first matching :class:`BodyFormatter`, or None.
        """
        if message is None:
            raise TypeError("A message is required.")

        if types is None:
            raise TypeError("Types are required.")

        types = [MediaType.valueof(t) for t in types]
        clazz = type(message)

        for formatter in self.formatters:
            if not formatter.can_format(clazz):
                continue

            if isinstance(message, View) and isinstance(formatter, ViewEngine):
                if message.engine and formatter.name != message.engine:
                    continue

            if _first_match(formatter.types, types):
                return formatter

        return None

    def parser(self, type_: type, types: typing.Iterable[MediaType]) -> typing.Optional[Parser]:
        """
        Selects a parser for a request body.

        :param type_: The type the body should be read as.
        :param types: The media types of the body, usually just the request's content type.
        :return: The first matching :class:`Parser`, or None.
        """
        if type_ is None:
            raise TypeError("A type is required.")

        if types is None:
            raise TypeError("Types are required.")

        types = [MediaType.valueof(t) for t in types]

        for parser in self.parsers:
            if parser.can_parse(type_) and _first_match(parser.types, types):
                return parser

        return None

    def __repr__(self):
        return "<BodyConverterSelector formatters={} parsers={}>".format(
            [str(f) for f in self.formatters], [str(p) for p in self.parsers]
        )

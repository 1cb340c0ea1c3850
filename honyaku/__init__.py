"""
Honyaku provides body formatters, body parsers and template view engines for werkzeug + asphalt web
applications, picked by content negotiation.

.. currentmodule:: honyaku

.. autosummary::
    :toctree: honyaku

    asphalt
    builtin
    formatter
    json
    mediatype
    parser
    renderers
    selector
    testing
    util
    view
"""
from honyaku.asphalt import Binder, Module, NegotiationComponent
from honyaku.formatter import BodyFormatter, BodyFormatterContext
from honyaku.mediatype import MediaType
from honyaku.parser import Parser, ParserContext
from honyaku.renderers.base import ViewEngine
from honyaku.selector import BodyConverterSelector
from honyaku.util import make_response, read_body
from honyaku.view import View

__version__ = "1.0.0"

__all__ = ("Binder", "Module", "NegotiationComponent", "BodyFormatter", "BodyFormatterContext", "MediaType",
           "Parser", "ParserContext", "ViewEngine", "BodyConverterSelector", "make_response", "read_body", "View")

"""
Testing helpers for Honyaku.
"""
import typing

from asphalt.core import Context
from werkzeug.test import EnvironBuilder
from werkzeug.wrappers import Request, Response

from honyaku.asphalt import NegotiationComponent
from honyaku.selector import BodyConverterSelector
from honyaku.util import make_response, read_body


def make_request(headers: dict = None, url: str = "/", method: str = "GET",
                 body: typing.Union[str, bytes] = None) -> Request:
    """
    Creates a request without a server.

    :param headers: The headers to use.
    :param url: The URL to use.
    :param method: The method to use.
    :param body: The body to use.
    :return: A new :class:`werkzeug.wrappers.Request`.
    """
    builder = EnvironBuilder(path=url, method=method, headers=headers or {}, data=body)
    return Request(builder.get_environ())


class Harness(object):
    """
    Starts a :class:`~.NegotiationComponent` in a context of its own, so that modules can be tested
    without an application.

    .. code:: python

        async with Harness(Json()) as harness:
            r = harness.inject_request({"a": 1}, {"Accept": "application/json"})
            assert r.data == b'{"a": 1}'

    :param modules: The modules to configure.
    :param cfg: Passed on to the component.
    """

    def __init__(self, *modules, **cfg):
        self.component = NegotiationComponent(modules, **cfg)

        self.ctx = None  # type: Context

    @property
    def selector(self) -> BodyConverterSelector:
        return self.component.selector

    async def __aenter__(self) -> "Harness":
        self.ctx = Context()
        await self.ctx.__aenter__()
        await self.component.start(self.ctx)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.ctx.__aexit__(exc_type, exc_val, exc_tb)
        self.ctx = None

    def inject_request(self, body, headers: dict = None, url: str = "/", method: str = "GET",
                       **kwargs) -> Response:
        """
        Formats a value as the response to a fake request.

        :param body: The value to format.
        :param headers: The request headers.
        :param kwargs: Passed on to :func:`~.make_response`.
        """
        return make_response(self.selector, make_request(headers, url, method), body, **kwargs)

    def read(self, type_: type, body: typing.Union[str, bytes], headers: dict = None, **kwargs):
        """
        Parses a fake request body.

        :param type_: The type to read.
        :param body: The raw body.
        :param headers: The request headers, usually including ``Content-Type``.
        :param kwargs: Passed on to :func:`~.read_body`.
        """
        return read_body(self.selector, make_request(headers, method="POST", body=body), type_, **kwargs)

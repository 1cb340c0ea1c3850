"""
The base view engine, which the template engine adapters inherit from and override.
"""
import abc
import typing

from honyaku.formatter import BodyFormatter, BodyFormatterContext
from honyaku.mediatype import HTML, MediaType
from honyaku.view import View


class ViewEngine(BodyFormatter):
    """
    A formatter that renders :class:`~.View` objects with a template engine.
    """

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """
        :return: The engine name, matched against :attr:`View.engine`.
        """

    @property
    def types(self) -> typing.List[MediaType]:
        return [HTML]

    def can_format(self, type_: type) -> bool:
        return isinstance(type_, type) and issubclass(type_, View)

    @abc.abstractmethod
    def render(self, view: View, locals: typing.Mapping[str, typing.Any]) -> str:
        """
        Renders a view out into a string.

        :param view: The view to render.
        :param locals: The request locals. Values in the view model take precedence over these.
        :return: A new :class:`str` which is the output of the template.
        """

    def format(self, body: View, ctx: BodyFormatterContext):
        rendered = self.render(body, ctx.locals)
        ctx.text(lambda out: out.write(rendered))

    def __str__(self):
        return self.name

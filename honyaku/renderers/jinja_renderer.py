"""
Jinja2 view engine.

.. code-block:: python

    component = NegotiationComponent(modules=[Jinja2("templates")])

    # in a route
    return View("index", {"user": user})  # renders templates/index.html

Helpers added to the ``jinja2.helpers`` set become template globals:

.. code-block:: python

    binder.add(HELPERS, format_money)
"""
import typing

from jinja2.environment import Environment, Template
# Default loader is the FileSystemLoader, contained inside a ChoiceLoader.
from jinja2.loaders import BaseLoader, ChoiceLoader, FileSystemLoader

from honyaku.asphalt import Binder, Module
from honyaku.renderers.base import ViewEngine
from honyaku.view import View

#: The set template helpers are collected in.
HELPERS = "jinja2.helpers"


class Jinja2Engine(ViewEngine):
    """
    A view engine that uses the Jinja2 Rendering Engine.

    :param environment: The :class:`jinja2.environment.Environment` to load templates from.
    :param suffix: Appended to view names to get template names.
    """

    def __init__(self, environment: Environment, suffix: str = ".html"):
        self.environment = environment
        self.suffix = suffix

    @property
    def name(self) -> str:
        return "jinja2"

    def get_template(self, view_name: str) -> Template:
        """
        Gets a :class:`jinja2.environment.Template` from the Environment.

        :param view_name: The view name, without suffix.
        :return: The new template object.
        """
        return self.environment.get_template(view_name + self.suffix)

    def render(self, view: View, locals: typing.Mapping[str, typing.Any]) -> str:
        template = self.get_template(view.name)
        return template.render(**{**locals, **view.model})


class Jinja2(Module):
    """
    Jinja2 template module.

    :param directories: The template directories. Defaults to ``templates``.
    :param suffix: The template suffix.
    :param loader: A loader to use instead of a FileSystemLoader over ``directories``.
    """

    def __init__(self, *directories: str, suffix: str = ".html", loader: BaseLoader = None):
        self._loader = ChoiceLoader(loaders=[])

        if loader is None:
            # Use a default FileSystemLoader.
            self._loader.loaders.append(FileSystemLoader(searchpath=list(directories) or ["templates"]))
        else:
            self._loader.loaders.append(loader)

        self.suffix = suffix
        self._blocks = []

    @property
    def loader(self) -> ChoiceLoader:
        return self._loader

    def add_loader(self, loader: BaseLoader):
        """
        Adds a loader to the ChoiceLoader contained within.

        :param loader: The Loader to add.
        """
        self.loader.loaders.append(loader)

    def do_with(self, block: typing.Callable[[Environment], typing.Any]) -> "Jinja2":
        """
        Customizes the environment once it is created, e.g. to add filters.

        :return: This module, so calls can be chained.
        """
        self._blocks.append(block)
        return self

    def configure(self, env: str, config: typing.Mapping, binder: Binder):
        # Templates are reloaded and never cached while developing.
        dev = env == "dev"
        environment = Environment(loader=self._loader, auto_reload=dev, cache_size=0 if dev else 400)
        for block in self._blocks:
            block(environment)

        engine = Jinja2Engine(environment, self.suffix)

        binder.bind(environment, types=Environment)
        binder.add_formatter(engine)
        binder.bind(engine, engine.name, types=ViewEngine)
        binder.on_finalize(lambda b: install_helpers(environment, b.get_set(HELPERS)))


def install_helpers(environment: Environment, helpers: typing.Iterable[typing.Callable]):
    """
    Adds helpers to the globals of an environment, under their ``__name__``.
    """
    for helper in helpers:
        environment.globals[helper.__name__] = helper

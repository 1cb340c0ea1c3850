"""
Mako view engine.
"""
import posixpath
import typing

from mako import exceptions
from mako.lookup import TemplateLookup
from mako.template import Template
from mako.util import to_list

from honyaku.asphalt import Binder, Module
from honyaku.renderers.base import ViewEngine
from honyaku.util import config_value
from honyaku.view import View

#: The set template helpers are collected in.
HELPERS = "mako.helpers"


class MakoEngine(ViewEngine):
    """
    A view engine that uses the Mako templating engine.

    :param lookup: The :class:`mako.lookup.TemplateLookup` to find templates with.
    :param suffix: Appended to view names to get template names.
    :param handle_exceptions: Should a rendered error template be returned in case of an exception?

    :ivar environment: The global environment for this engine.
        This is passed into the template renderer every time.
    """

    def __init__(self, lookup: TemplateLookup, suffix: str = ".html", handle_exceptions: bool = False):
        self.template_lookup = lookup
        self.suffix = suffix
        self.handle_exceptions = handle_exceptions

        # Global environment.
        self.environment = {}

    @property
    def name(self) -> str:
        return "mako"

    def add_template_directories(self, *directories):
        """
        Adds directories to the lookup paths for the templates.

        :param directories: The directories to add.
        """
        # Process the directories to be "mako compatible."
        dirs = [posixpath.normpath(d) for d in to_list(directories, ())]
        self.template_lookup.directories += dirs

    def get_template(self, view_name: str) -> Template:
        """
        Gets a :class:`mako.template.Template` object for a view.

        :param view_name: The view name, without suffix.
        :return: The template returned from the disk.
        """
        return self.template_lookup.get_template(view_name + self.suffix)

    def render(self, view: View, locals: typing.Mapping[str, typing.Any]) -> str:
        template = self.get_template(view.name)
        try:
            return template.render(**{**self.environment, **locals, **view.model})
        except Exception:
            if not self.handle_exceptions:
                raise

            # Render the error template.
            return exceptions.text_error_template().render()


class Mako(Module):
    """
    Mako template module.

    The ``mako.module_directory`` configuration key sets where compiled templates are cached.

    :param directories: The template directories. Defaults to ``templates``.
    :param suffix: The template suffix.
    :param handle_exceptions: Render Mako's error template instead of raising.
    """

    def __init__(self, *directories: str, suffix: str = ".html", handle_exceptions: bool = False):
        self.directories = [posixpath.normpath(d) for d in directories] or ["templates"]
        self.suffix = suffix
        self.handle_exceptions = handle_exceptions

    def configure(self, env: str, config: typing.Mapping, binder: Binder):
        lookup = TemplateLookup(directories=self.directories,
                                filesystem_checks=env == "dev",
                                module_directory=config_value(config, "mako.module_directory"),
                                input_encoding=config_value(config, "application.charset", "utf-8"))
        engine = MakoEngine(lookup, self.suffix, self.handle_exceptions)

        binder.bind(lookup, types=TemplateLookup)
        binder.add_formatter(engine)
        binder.bind(engine, engine.name, types=ViewEngine)
        binder.on_finalize(lambda b: engine.environment.update({h.__name__: h for h in b.get_set(HELPERS)}))

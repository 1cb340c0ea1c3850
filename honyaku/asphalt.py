"""
Asphalt wrappers for Honyaku.

The asphalt :class:`~asphalt.core.Context` plays the injector: modules publish what they provide as
resources, and contribute formatters and parsers through a :class:`Binder`.

.. code-block:: yaml

    components:
      honyaku:
        type: honyaku.asphalt:NegotiationComponent
        env: prod
        modules:
          - honyaku.json:Json
          - myapp.views:jinja
        application:
          tz: Europe/London
"""
import abc
import logging
import typing

from asphalt.core import Component, Context, resolve_reference

from honyaku import builtin
from honyaku.exc import ConfigurationError
from honyaku.formatter import BodyFormatter
from honyaku.parser import Parser
from honyaku.selector import BodyConverterSelector
from honyaku.util import DEFAULT_CONFIG, config_value, merge_config


class Binder(object):
    """
    Collects what modules provide while they are being configured.

    Single values are published straight into the asphalt context with :meth:`bind`. Ordered sets of values
    (formatters, parsers, template helpers...) are collected with :meth:`add` and read back with
    :meth:`get_set`, usually from a callback registered with :meth:`on_finalize`.

    :param ctx: The context to publish resources in.
    """

    def __init__(self, ctx: Context):
        self.ctx = ctx

        self.logger = logging.getLogger("Honyaku")

        self._sets = {}  # type: typing.Dict[typing.Any, list]
        self._callbacks = []
        self._finalized = False

    def bind(self, value, name: str = "default", types: typing.Union[type, typing.Iterable[type]] = ()):
        """
        Publishes a resource.

        :param value: The resource.
        :param name: The resource name.
        :param types: The type(s) to publish it as. Defaults to the type of ``value``.
        """
        if isinstance(types, type):
            types = (types,)

        types = tuple(types) or (type(value),)
        self.ctx.add_resource(value, name, types=types)
        self.logger.debug("Bound {!r} as {} named {!r}".format(value, ", ".join(t.__name__ for t in types), name))

    def add(self, key, value):
        """
        Adds a value to a set. Adding the same object twice has no effect; order is kept.

        :param key: The set to add to. Any hashable works, e.g. ``BodyFormatter`` or ``"jinja2.helpers"``.
        :param value: The value to add.
        """
        if self._finalized:
            raise RuntimeError("Binder was already finalized")

        values = self._sets.setdefault(key, [])
        if any(v is value for v in values):
            return

        values.append(value)

    def get_set(self, key) -> tuple:
        """
        :return: The values added to a set, in order. Unknown sets are empty.
        """
        return tuple(self._sets.get(key, ()))

    def add_formatter(self, formatter: BodyFormatter):
        self.add(BodyFormatter, formatter)

    def add_parser(self, parser: Parser):
        self.add(Parser, parser)

    @property
    def formatters(self) -> typing.Tuple[BodyFormatter, ...]:
        return self.get_set(BodyFormatter)

    @property
    def parsers(self) -> typing.Tuple[Parser, ...]:
        return self.get_set(Parser)

    def on_finalize(self, cb: typing.Callable[["Binder"], typing.Any]):
        """
        Registers a callback to run once every module has been configured.

        :param cb: Called with this binder.
        """
        self._callbacks.append(cb)

    def finalize(self):
        """
        Runs the finalize callbacks, in registration order. Subsequent calls do nothing.
        """
        if self._finalized:
            return

        for cb in self._callbacks:
            cb(self)

        self._finalized = True

    @property
    def finalized(self) -> bool:
        return self._finalized


class Module(abc.ABC):
    """
    The base class for extension modules.
    """

    @abc.abstractmethod
    def configure(self, env: str, config: typing.Mapping, binder: Binder):
        """
        Publishes resources and contributes formatters, parsers and set values.

        :param env: The environment name, e.g. ``dev`` or ``prod``.
        :param config: The application configuration.
        :param binder: The :class:`Binder` to contribute to.
        """


class NegotiationComponent(Component):
    """
    A component that configures modules and publishes a :class:`~.BodyConverterSelector`.

    :param modules: The modules to configure, in order. Each may be a module object, a class (which is
        instantiated with no arguments), or a reference string such as ``"honyaku.json:Json"``.
    :param env: The environment name. Overrides ``application.env`` from the configuration.
    :param cfg: Additional configuration, merged over :data:`~.DEFAULT_CONFIG`.
    """

    def __init__(self, modules: typing.Iterable = (), env: str = None, **cfg):
        #: The modules configured by this component.
        self.modules = [self.resolve_module(m) for m in modules]

        #: The configuration handed to every module.
        self.config = merge_config(DEFAULT_CONFIG, cfg)
        if env:
            self.config["application"]["env"] = env

        #: The environment name.
        self.env = config_value(self.config, "application.env", "dev")

        #: The selector published by :meth:`start`.
        self.selector = None  # type: BodyConverterSelector

        self.logger = logging.getLogger("Honyaku")

    @staticmethod
    def resolve_module(module) -> Module:
        """
        Turns a reference or a class into a module object.

        :raises ConfigurationError: If the result has no ``configure`` method.
        """
        if isinstance(module, str):
            module = resolve_reference(module)

        if isinstance(module, type):
            module = module()

        if not callable(getattr(module, "configure", None)):
            raise ConfigurationError("{!r} is not a module".format(module))

        return module

    async def start(self, ctx: Context):
        """
        Configures every module and publishes the selector.

        :param ctx: The base context.
        """
        binder = Binder(ctx)

        for parser in builtin.PARSERS:
            binder.add_parser(parser)

        for formatter in builtin.FORMATTERS:
            binder.add_formatter(formatter)

        for module in self.modules:
            self.logger.debug("Configuring {!r}.".format(module))
            module.configure(self.env, self.config, binder)

        binder.add_formatter(builtin.format_any)
        binder.finalize()

        self.selector = BodyConverterSelector(binder.formatters, binder.parsers)
        binder.bind(self.selector, types=BodyConverterSelector)
        binder.bind(self.config, "honyaku_config", types=dict)

        self.logger.info("Honyaku started in {} with formatters [{}] and parsers [{}].".format(
            self.env,
            ", ".join(map(str, self.selector.formatters)),
            ", ".join(map(str, self.selector.parsers))))

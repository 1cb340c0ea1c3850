"""
JSON support, built on the standard library :mod:`json` module.

This module provides a JSON :class:`~.Parser` and :class:`~.BodyFormatter`, and publishes the
:class:`JsonMapper` they share.

.. code-block:: python

    component = NegotiationComponent(modules=[Json()])

    # custom mapper settings
    Json().do_with(lambda mapper: mapper.options.update(indent=2))

    # other media types
    Json().types("application/json", "application/vnd.api+json")

Other modules can teach the mapper new types by adding a :class:`JsonModule` to the ``json.modules`` set:

.. code-block:: python

    binder.add(MODULES, JsonModule(serializers={Money: lambda mapper, m: str(m)}))
"""
import collections.abc
import dataclasses
import datetime
import decimal
import enum
import json
import pathlib
import types
import typing
import uuid
import zoneinfo

from honyaku.asphalt import Binder, Module
from honyaku.exc import ConfigurationError
from honyaku.formatter import BodyFormatter, BodyFormatterContext
from honyaku.mediatype import JSON, MediaType
from honyaku.parser import Parser, ParserContext
from honyaku.util import config_value

#: The set JSON modules are collected in.
MODULES = "json.modules"

_NATIVE = (dict, list, tuple, str, int, float, bool, type(None))

_NONE = type(None)

_UNIONS = (typing.Union,) + ((types.UnionType,) if hasattr(types, "UnionType") else ())


def _is_container(origin) -> bool:
    return isinstance(origin, type) and issubclass(origin, collections.abc.Iterable) \
        and not issubclass(origin, (str, bytes, bytearray))


def _lookup(table: dict, type_: type):
    for klass in type_.__mro__:
        if klass in table:
            return table[klass]

    return None


class JsonModule(object):
    """
    Extends a :class:`JsonMapper` with support for more types.

    :param serializers: Maps types to ``fn(mapper, value)``, returning something JSON can encode.
    :param deserializers: Maps types to ``fn(mapper, type_, data)``, building a value from decoded JSON.
    """

    def __init__(self, serializers: dict = None, deserializers: dict = None):
        self.serializers = dict(serializers or {})
        self.deserializers = dict(deserializers or {})

    def serializer_for(self, type_: type) -> typing.Optional[typing.Callable]:
        return _lookup(self.serializers, type_)

    def deserializer_for(self, type_: type) -> typing.Optional[typing.Callable]:
        return _lookup(self.deserializers, type_)

    def __repr__(self):
        return "<{} types={}>".format(type(self).__name__, sorted(t.__name__ for t in self.serializers))


def _write_datetime(mapper: "JsonMapper", value: datetime.datetime):
    if value.tzinfo is not None and mapper.tz is not None:
        value = value.astimezone(mapper.tz)

    if mapper.date_format:
        return value.strftime(mapper.date_format)

    return value.isoformat()


def _read_datetime(mapper: "JsonMapper", type_: type, data: str):
    if mapper.date_format:
        value = datetime.datetime.strptime(data, mapper.date_format)
    else:
        value = datetime.datetime.fromisoformat(data)

    if value.tzinfo is None and mapper.tz is not None:
        value = value.replace(tzinfo=mapper.tz)

    return value


class TemporalModule(JsonModule):
    """
    Dates and times. Datetimes follow the mapper's ``date_format`` and ``tz``, everything else is ISO 8601.
    Timedeltas are written as seconds.
    """

    def __init__(self):
        super().__init__(
            serializers={
                datetime.datetime: _write_datetime,
                datetime.date: lambda mapper, value: value.isoformat(),
                datetime.time: lambda mapper, value: value.isoformat(),
                datetime.timedelta: lambda mapper, value: value.total_seconds(),
            },
            deserializers={
                datetime.datetime: _read_datetime,
                datetime.date: lambda mapper, type_, data: type_.fromisoformat(data),
                datetime.time: lambda mapper, type_, data: type_.fromisoformat(data),
                datetime.timedelta: lambda mapper, type_, data: type_(seconds=data),
            }
        )


class StandardModule(JsonModule):
    """
    UUIDs, decimals, enums, sets and paths.
    """

    def __init__(self):
        super().__init__(
            serializers={
                uuid.UUID: lambda mapper, value: str(value),
                decimal.Decimal: lambda mapper, value: str(value),
                enum.Enum: lambda mapper, value: value.value,
                set: lambda mapper, value: list(value),
                frozenset: lambda mapper, value: list(value),
                pathlib.PurePath: lambda mapper, value: str(value),
            },
            deserializers={
                uuid.UUID: lambda mapper, type_, data: type_(data),
                decimal.Decimal: lambda mapper, type_, data: type_(str(data)),
                enum.Enum: lambda mapper, type_, data: type_(data),
                set: lambda mapper, type_, data: type_(data),
                frozenset: lambda mapper, type_, data: type_(data),
                pathlib.PurePath: lambda mapper, type_, data: type_(data),
            }
        )


class JsonMapper(object):
    """
    Reads and writes JSON, with support for dataclasses and for the types covered by its
    :class:`JsonModule` list.

    :param modules: The modules to start with. Defaults to a :class:`TemporalModule` and a :class:`StandardModule`.
    :param options: Keyword arguments passed to :func:`json.dump`, e.g. ``indent``.
    """

    def __init__(self, modules: typing.Iterable[JsonModule] = None, **options):
        if modules is None:
            modules = [TemporalModule(), StandardModule()]

        #: The registered modules. Later modules take precedence.
        self.modules = []  # type: typing.List[JsonModule]
        self.register_modules(modules)

        #: The :meth:`datetime.datetime.strftime` format for datetimes. None means ISO 8601.
        self.date_format = None  # type: str

        #: The timezone aware datetimes are converted to.
        self.tz = None  # type: datetime.tzinfo

        self.options = {"ensure_ascii": False, **options}

    def configure(self, *, date_format: str = None, tz: typing.Union[str, datetime.tzinfo] = None):
        """
        Sets the datetime handling of this mapper.

        :param date_format: The datetime format. None means ISO 8601.
        :param tz: The timezone, or its IANA name.
        :raises ConfigurationError: If the timezone is unknown.
        """
        self.date_format = date_format

        if isinstance(tz, str):
            try:
                tz = zoneinfo.ZoneInfo(tz)
            except (zoneinfo.ZoneInfoNotFoundError, ValueError) as e:
                raise ConfigurationError("Unknown timezone {!r}".format(tz)) from e

        self.tz = tz

    def register_module(self, module: JsonModule):
        if any(m is module for m in self.modules):
            return

        self.modules.append(module)

    def register_modules(self, modules: typing.Iterable[JsonModule]):
        for module in modules:
            self.register_module(module)

    def _serializer(self, type_: type):
        for module in reversed(self.modules):
            fn = module.serializer_for(type_)
            if fn is not None:
                return fn

        return None

    def _deserializer(self, type_: type):
        for module in reversed(self.modules):
            fn = module.deserializer_for(type_)
            if fn is not None:
                return fn

        return None

    def can_serialize(self, type_: type) -> bool:
        if issubclass(type_, _NATIVE):
            return True

        if dataclasses.is_dataclass(type_):
            return True

        return self._serializer(type_) is not None

    def can_deserialize(self, type_) -> bool:
        if type_ in (None, object, typing.Any):
            return True

        origin = typing.get_origin(type_)
        if origin is not None:
            if origin is typing.Literal:
                return True

            args = [a for a in typing.get_args(type_) if a is not Ellipsis and a is not _NONE]
            if origin in _UNIONS or _is_container(origin):
                return all(self.can_deserialize(a) for a in args)

            return self.can_deserialize(origin)

        if not isinstance(type_, type):
            return False

        if issubclass(type_, _NATIVE) or dataclasses.is_dataclass(type_):
            return True

        return self._deserializer(type_) is not None

    def _default(self, value):
        fn = self._serializer(type(value))
        if fn is not None:
            return fn(self, value)

        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}

        raise TypeError("Object of type {} is not JSON serializable".format(type(value).__name__))

    def write_value(self, out: typing.TextIO, value):
        """
        Writes a value as JSON into a text output.
        """
        json.dump(value, out, default=self._default, **self.options)

    def write_value_as_string(self, value) -> str:
        return json.dumps(value, default=self._default, **self.options)

    def read_value(self, data: typing.Union[str, bytes], type_=object):
        """
        Reads a JSON document as ``type_``.

        :param data: The document.
        :param type_: The type to read. ``object`` returns the decoded JSON as-is.
        :raises ValueError: If the document is not valid JSON.
        :raises TypeError: If the document can't be read as ``type_``.
        """
        return self.convert(json.loads(data), type_)

    def convert(self, data, type_):
        """
        Converts decoded JSON into ``type_``.

        ``type_`` may also be a generic alias such as ``typing.List[Item]`` or ``typing.Optional[datetime]``;
        containers are converted element by element.
        """
        if type_ in (None, object, typing.Any):
            return data

        origin = typing.get_origin(type_)
        if origin is not None:
            return self._convert_generic(data, type_, origin, typing.get_args(type_))

        if not isinstance(type_, type):
            return data

        fn = self._deserializer(type_)
        if fn is not None:
            return fn(self, type_, data)

        if dataclasses.is_dataclass(type_):
            if not isinstance(data, dict):
                raise TypeError("Cannot read {} as {}".format(type(data).__name__, type_.__name__))

            hints = typing.get_type_hints(type_)
            # Unknown keys make the constructor raise a TypeError.
            return type_(**{k: self.convert(v, hints.get(k, object)) for k, v in data.items()})

        if type_ is float and isinstance(data, int) and not isinstance(data, bool):
            return float(data)

        if issubclass(type_, tuple) and isinstance(data, list):
            return type_(data)

        if isinstance(data, type_):
            return data

        raise TypeError("Cannot read {} as {}".format(type(data).__name__, type_.__name__))

    def _convert_generic(self, data, type_, origin, args):
        if origin in _UNIONS:
            if data is None and _NONE in args:
                return None

            for arg in args:
                if arg is _NONE:
                    continue

                try:
                    return self.convert(data, arg)
                except (TypeError, ValueError):
                    continue

            raise TypeError("Cannot read {} as {}".format(type(data).__name__, type_))

        if origin is typing.Literal:
            if data not in args:
                raise TypeError("{!r} is not one of {}".format(data, args))

            return data

        if not _is_container(origin):
            return self.convert(data, origin)

        if issubclass(origin, collections.abc.Mapping):
            if not isinstance(data, dict):
                raise TypeError("Cannot read {} as {}".format(type(data).__name__, type_))

            key_type, value_type = args or (object, object)

            def read_key(key):
                # Object keys are always strings in JSON.
                if key_type in (int, float):
                    return key_type(key)

                return self.convert(key, key_type)

            return {read_key(k): self.convert(v, value_type) for k, v in data.items()}

        if not isinstance(data, list):
            raise TypeError("Cannot read {} as {}".format(type(data).__name__, type_))

        if issubclass(origin, tuple):
            if not args:
                args = (object,) * len(data)
            elif len(args) == 2 and args[1] is Ellipsis:
                args = (args[0],) * len(data)
            elif len(args) != len(data):
                raise TypeError("Expected {} items for {}, got {}".format(len(args), type_, len(data)))

            return tuple(self.convert(item, t) for item, t in zip(data, args))

        items = [self.convert(item, args[0] if args else object) for item in data]
        if issubclass(origin, collections.abc.Set):
            return frozenset(items) if issubclass(origin, frozenset) else set(items)

        return items


class JsonBodyHandler(BodyFormatter, Parser):
    """
    The JSON formatter and parser.
    """

    def __init__(self, mapper: JsonMapper, types: typing.List[MediaType]):
        self.mapper = mapper
        self._types = list(types)

    @property
    def types(self) -> typing.List[MediaType]:
        return self._types

    def can_format(self, type_: type) -> bool:
        return self.mapper.can_serialize(type_)

    def can_parse(self, type_: type) -> bool:
        return self.mapper.can_deserialize(type_)

    def format(self, body, ctx: BodyFormatterContext):
        ctx.text(lambda out: self.mapper.write_value(out, body))

    def parse(self, type_: type, ctx: ParserContext):
        return self.mapper.read_value(ctx.text(), type_)

    def __str__(self):
        return "json"


class Json(Module):
    """
    JSON support module.

    :param mapper: The :class:`JsonMapper` to use. A new one is created if omitted.
    """

    def __init__(self, mapper: JsonMapper = None):
        self.mapper = mapper if mapper is not None else JsonMapper()

        #: The JSON modules this module contributes to the ``json.modules`` set.
        self.modules = list(self.mapper.modules)

        self._types = [JSON]
        self._blocks = []

    def types(self, *types: typing.Union[str, MediaType]) -> "Json":
        """
        Sets the media types handled by the formatter and the parser.

        :return: This module, so calls can be chained.
        """
        if not types:
            raise TypeError("At least one media type is required.")

        self._types = [MediaType.valueof(t) for t in types]
        return self

    def do_with(self, block: typing.Callable[[JsonMapper], typing.Any]) -> "Json":
        """
        Customizes the mapper. Blocks run during :meth:`configure`, after the configuration is applied.

        :return: This module, so calls can be chained.
        """
        if block is None:
            raise TypeError("A json block is required.")

        self._blocks.append(block)
        return self

    def configure(self, env: str, config: typing.Mapping, binder: Binder):
        self.mapper.configure(date_format=config_value(config, "application.date_format"),
                              tz=config_value(config, "application.tz"))
        for block in self._blocks:
            block(self.mapper)

        for module in self.modules:
            binder.add(MODULES, module)

        binder.bind(self.mapper, types=JsonMapper)

        # Modules added by anyone are registered once everything is configured.
        binder.on_finalize(lambda b: self.mapper.register_modules(b.get_set(MODULES)))

        handler = JsonBodyHandler(self.mapper, self._types)
        binder.add_formatter(handler)
        binder.add_parser(handler)

        # direct access
        binder.bind(handler, str(handler), types=(BodyFormatter, Parser))

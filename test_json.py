"""
py.test test suite for JSON support.
"""
import dataclasses
import datetime
import decimal
import enum
import typing
import uuid
import zoneinfo

import pytest

from honyaku.asphalt import Module
from honyaku.exc import ConfigurationError
from honyaku.formatter import BodyFormatter
from honyaku.json import MODULES, Json, JsonBodyHandler, JsonMapper, JsonModule, StandardModule, TemporalModule
from honyaku.parser import Parser
from honyaku.testing import Harness

JSON_HEADERS = {"Accept": "application/json", "Content-Type": "application/json"}


@dataclasses.dataclass
class Point:
    x: int
    y: int


@dataclasses.dataclass
class Shape:
    name: str
    origin: Point
    tags: typing.List[str] = dataclasses.field(default_factory=list)


class Colour(enum.Enum):
    RED = "red"


@dataclasses.dataclass
class Item:
    n: int


@dataclasses.dataclass
class Order:
    items: typing.List[Item]
    at: typing.Optional[datetime.datetime] = None
    counts: typing.Dict[str, int] = dataclasses.field(default_factory=dict)



class Money(object):
    def __init__(self, cents: int):
        self.cents = cents


class MoneyModule(Module):
    """
    Contributes a JSON module from outside the Json module.
    """

    def configure(self, env, config, binder):
        binder.add(MODULES, JsonModule(
            serializers={Money: lambda mapper, value: "{:.2f}".format(value.cents / 100)},
            deserializers={Money: lambda mapper, type_, data: type_(round(float(data) * 100))},
        ))


def make_mapper(**kwargs) -> JsonMapper:
    mapper = JsonMapper()
    mapper.configure(**kwargs)
    return mapper


def test_can_serialize():
    mapper = make_mapper()
    for type_ in (dict, list, tuple, str, int, float, bool, type(None), Point, datetime.datetime, uuid.UUID):
        assert mapper.can_serialize(type_), type_

    assert not mapper.can_serialize(object)
    assert not mapper.can_serialize(Money)
    assert not JsonMapper(modules=[]).can_serialize(datetime.datetime)


def test_write_values():
    mapper = make_mapper()
    value = {
        "shape": Shape("square", Point(1, 2), ["a"]),
        "id": uuid.UUID(int=1),
        "price": decimal.Decimal("9.99"),
        "colour": Colour.RED,
        "day": datetime.date(2017, 4, 1),
        "took": datetime.timedelta(seconds=90),
    }
    assert mapper.write_value_as_string(value) == (
        '{"shape": {"name": "square", "origin": {"x": 1, "y": 2}, "tags": ["a"]}, '
        '"id": "00000000-0000-0000-0000-000000000001", "price": "9.99", "colour": "red", '
        '"day": "2017-04-01", "took": 90.0}'
    )

    with pytest.raises(TypeError):
        mapper.write_value_as_string(object())


def test_datetimes_follow_configuration():
    when = datetime.datetime(2017, 4, 1, 12, 30, tzinfo=zoneinfo.ZoneInfo("Europe/Berlin"))

    assert make_mapper(tz="UTC").write_value_as_string(when) == '"2017-04-01T10:30:00+00:00"'
    assert make_mapper(tz="UTC", date_format="%d-%m-%Y %H:%M").write_value_as_string(when) == '"01-04-2017 10:30"'

    read = make_mapper(tz="UTC").read_value('"2017-04-01T10:30:00"', datetime.datetime)
    assert read == datetime.datetime(2017, 4, 1, 10, 30, tzinfo=zoneinfo.ZoneInfo("UTC"))


def test_unknown_timezone():
    with pytest.raises(ConfigurationError):
        make_mapper(tz="Nowhere/Special")


def test_read_values():
    mapper = make_mapper()

    shape = mapper.read_value(b'{"name": "square", "origin": {"x": 1, "y": 2}}', Shape)
    assert shape == Shape("square", Point(1, 2))

    assert mapper.read_value('{"a": [1, 2]}') == {"a": [1, 2]}
    assert mapper.read_value('1', float) == 1.0
    assert mapper.read_value('[1, 2]', tuple) == (1, 2)
    assert mapper.read_value('"red"', Colour) is Colour.RED
    assert mapper.read_value('["a", "a"]', set) == {"a"}


def test_read_errors():
    mapper = make_mapper()

    with pytest.raises(TypeError):
        mapper.read_value('[1]', dict)

    with pytest.raises(TypeError):
        # unknown key
        mapper.read_value('{"x": 1, "y": 2, "z": 3}', Point)

    with pytest.raises(ValueError):
        mapper.read_value('{not json', dict)


def test_can_deserialize():
    mapper = make_mapper()
    assert mapper.can_deserialize(object)
    assert mapper.can_deserialize(Shape)
    assert mapper.can_deserialize(datetime.date)
    assert not mapper.can_deserialize(Money)

    assert mapper.can_deserialize(typing.List[Item])
    assert mapper.can_deserialize(typing.Optional[datetime.datetime])
    assert mapper.can_deserialize(typing.Dict[str, typing.Tuple[int, ...]])
    assert not mapper.can_deserialize(typing.List[Money])
    assert not mapper.can_deserialize(typing.Union[int, Money])


def test_default_modules():
    mapper = JsonMapper()
    assert any(isinstance(m, TemporalModule) for m in mapper.modules)
    assert any(isinstance(m, StandardModule) for m in mapper.modules)

    assert mapper.write_value_as_string([uuid.UUID(int=1), datetime.date(2017, 4, 1)]) == \
        '["00000000-0000-0000-0000-000000000001", "2017-04-01"]'


def test_read_generic_types():
    mapper = make_mapper(tz="UTC")

    assert mapper.read_value('[{"n": 1}, {"n": 2}]', typing.List[Item]) == [Item(1), Item(2)]
    assert mapper.read_value('[1, "a"]', typing.Tuple[int, str]) == (1, "a")
    assert mapper.read_value('[1, 2, 1]', typing.FrozenSet[int]) == frozenset({1, 2})
    assert mapper.read_value('{"1": "red"}', typing.Dict[int, Colour]) == {1: Colour.RED}
    assert mapper.read_value('null', typing.Optional[Item]) is None
    assert mapper.read_value('{"n": 3}', typing.Optional[Item]) == Item(3)
    assert mapper.read_value('"a"', typing.Union[int, str]) == "a"

    order = mapper.read_value('{"items": [{"n": 1}], "at": "2017-04-01T10:30:00", "counts": {"a": 1}}', Order)
    assert order == Order([Item(1)], datetime.datetime(2017, 4, 1, 10, 30, tzinfo=zoneinfo.ZoneInfo("UTC")),
                          {"a": 1})
    assert isinstance(order.items[0], Item)

    assert mapper.read_value('{"items": []}', Order).at is None


def test_read_generic_errors():
    mapper = make_mapper()

    with pytest.raises(TypeError):
        mapper.read_value('[{"n": 1}, 2]', typing.List[Item])

    with pytest.raises(TypeError):
        mapper.read_value('{"n": 1}', typing.List[Item])

    with pytest.raises(TypeError):
        mapper.read_value('[1, 2, 3]', typing.Tuple[int, int])

    with pytest.raises(TypeError):
        mapper.read_value('null', typing.Union[int, str])

    with pytest.raises(TypeError):
        mapper.read_value('{"items": [{"n": "one"}]}', Order)



@pytest.mark.asyncio
async def test_json_module_formats():
    async with Harness(Json()) as harness:
        r = harness.inject_request({"hello": "world"}, {"Accept": "application/json"})
        assert r.status_code == 200
        assert r.headers["Content-Type"] == "application/json; charset=utf-8"
        assert r.data == b'{"hello": "world"}'

        # text values go to the generic formatter when only html is accepted
        r = harness.inject_request("hello", {"Accept": "text/html"})
        assert r.headers["Content-Type"] == "text/html; charset=utf-8"
        assert r.data == b"hello"

        # but the json formatter is registered first
        r = harness.inject_request("hello", {"Accept": "text/html, application/json"})
        assert r.headers["Content-Type"] == "application/json; charset=utf-8"
        assert r.data == b'"hello"'


@pytest.mark.asyncio
async def test_json_module_parses():
    async with Harness(Json()) as harness:
        shape = harness.read(Shape, '{"name": "tri", "origin": {"x": 0, "y": 1}, "tags": []}', JSON_HEADERS)
        assert shape == Shape("tri", Point(0, 1))

        # built-in parsers come first
        assert harness.read(str, '"quoted"', JSON_HEADERS) == '"quoted"'

        items = harness.read(typing.List[Item], '[{"n": 1}]', {"Content-Type": "application/json"})
        assert items == [Item(1)]

        order = harness.read(Order, '{"items": [{"n": 2}]}', JSON_HEADERS)
        assert order.items == [Item(2)]



@pytest.mark.asyncio
async def test_json_module_bindings():
    module = Json()
    async with Harness(module) as harness:
        assert harness.ctx.get_resource(JsonMapper) is module.mapper

        handler = harness.ctx.get_resource(BodyFormatter, "json")
        assert isinstance(handler, JsonBodyHandler)
        assert harness.ctx.get_resource(Parser, "json") is handler
        assert handler in harness.selector.formatters
        assert handler in harness.selector.parsers

        assert module.mapper.tz == zoneinfo.ZoneInfo("UTC")


@pytest.mark.asyncio
async def test_json_custom_types():
    module = Json().types("application/vnd.api+json")
    async with Harness(module) as harness:
        r = harness.inject_request([1, 2], {"Accept": "application/*+json"})
        assert r.headers["Content-Type"] == "application/vnd.api+json; charset=utf-8"
        assert r.data == b"[1, 2]"

    with pytest.raises(TypeError):
        Json().types()


@pytest.mark.asyncio
async def test_json_modules_from_other_modules():
    async with Harness(Json(), MoneyModule()) as harness:
        r = harness.inject_request({"price": Money(150)}, {"Accept": "application/json"})
        assert r.data == b'{"price": "1.50"}'

        money = harness.read(Money, '"2.25"', JSON_HEADERS)
        assert money.cents == 225


@pytest.mark.asyncio
async def test_do_with_runs_after_configuration():
    module = Json().do_with(lambda mapper: mapper.options.update(indent=1)) \
        .do_with(lambda mapper: setattr(mapper, "date_format", "%Y"))

    async with Harness(module, application={"date_format": "%d"}) as harness:
        r = harness.inject_request({"at": datetime.datetime(2017, 4, 1)}, {"Accept": "application/json"})
        assert r.data == b'{\n "at": "2017"\n}'

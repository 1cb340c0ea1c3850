"""
Media types.

A :class:`MediaType` is a ``type/subtype`` pair with optional parameters. Matching is wildcard aware and
symmetric, so ``*/*`` matches ``application/json`` and ``application/json`` matches ``*/*``.

.. code-block:: python

    accept = MediaType.parse("text/html, application/json;q=0.9, */*;q=0.1")
    assert accept[0] == HTML
    assert JSON.matches("application/*")
"""
import mimetypes
import types
import typing

from werkzeug.http import parse_list_header, parse_options_header

from honyaku.exc import InvalidMediaTypeError

# Subtypes that carry text even though their primary type is not ``text``.
_TEXT_SUBTYPES = ("json", "xml", "javascript", "x-javascript", "ecmascript", "x-www-form-urlencoded")


def _subtype_matches(pattern: str, subtype: str) -> bool:
    if pattern == "*" or pattern == subtype:
        return True

    # Structured syntax suffixes, e.g. ``*+json`` matches ``vnd.api+json``.
    if pattern.startswith("*+"):
        suffix = pattern[2:]
        return subtype == suffix or subtype.endswith("+" + suffix)

    return False


class MediaType(object):
    """
    An immutable media type.

    :param type_: The primary type, e.g. ``text``. ``*`` is a wildcard.
    :param subtype: The subtype, e.g. ``html``. ``*`` (or ``*+suffix``) is a wildcard.
    :param params: Parameters such as ``charset`` or ``q``. Keys are case-insensitive.
    """

    __slots__ = ("_type", "_subtype", "_params", "_quality")

    def __init__(self, type_: str, subtype: str, params: typing.Mapping[str, str] = None):
        type_ = (type_ or "").strip().lower()
        subtype = (subtype or "").strip().lower()
        name = "{}/{}".format(type_, subtype)

        if not type_ or not subtype:
            raise InvalidMediaTypeError(name, "type and subtype are required")

        if type_ == "*" and subtype != "*":
            raise InvalidMediaTypeError(name, "a wildcard type requires a wildcard subtype")

        self._type = type_
        self._subtype = subtype
        self._params = types.MappingProxyType({k.lower(): v for k, v in (params or {}).items()})

        try:
            self._quality = float(self._params.get("q", 1.0))
        except ValueError:
            raise InvalidMediaTypeError(name, "q must be a number") from None

        if not 0.0 <= self._quality <= 1.0:
            raise InvalidMediaTypeError(name, "q must be between 0 and 1")

    @classmethod
    def valueof(cls, value: typing.Union[str, "MediaType"]) -> "MediaType":
        """
        Parses a single media type, such as ``text/html; charset=utf-8``.

        :param value: The text to parse. Existing :class:`MediaType` instances are returned as-is.
        :return: The parsed :class:`MediaType`.
        :raises InvalidMediaTypeError: If the text is not a valid media type.
        """
        if isinstance(value, MediaType):
            return value

        if value is None:
            raise InvalidMediaTypeError(value, "a media type is required")

        name, params = parse_options_header(value.strip())
        if not name:
            raise InvalidMediaTypeError(value, "empty media type")

        # Some clients send a lonely ``*`` in place of ``*/*``.
        if name == "*":
            name = "*/*"

        type_, sep, subtype = name.partition("/")
        if not sep or "/" in subtype:
            raise InvalidMediaTypeError(value, "expected type/subtype")

        return cls(type_, subtype, params)

    @classmethod
    def parse(cls, header: str) -> typing.List["MediaType"]:
        """
        Parses an ``Accept``-like header into a list of media types, most preferred first.

        Entries are ordered by quality, then by specificity (concrete types before ``type/*`` before ``*/*``),
        then by their position in the header. Entries with ``q=0`` are refusals; they are kept, last, so
        :func:`acceptable` can exclude the types they name.

        :param header: The header value. A missing or blank header means ``*/*``.
        :return: A new list of :class:`MediaType`.
        """
        if header is None or not header.strip():
            return [ALL]

        parsed = []
        for position, item in enumerate(parse_list_header(header)):
            if not item.strip():
                continue

            parsed.append((position, cls.valueof(item)))

        parsed.sort(key=lambda pair: (-pair[1].quality, pair[1].specificity, -len(pair[1].params), pair[0]))
        return [mtype for _, mtype in parsed]

    @classmethod
    def by_path(cls, path) -> typing.Optional["MediaType"]:
        """
        Guesses the media type of a file from its name.

        :param path: A file name or path-like object.
        :return: The :class:`MediaType`, or None if it could not be guessed.
        """
        guessed, _ = mimetypes.guess_type(str(path))
        if guessed is None:
            return None

        return cls.valueof(guessed)

    @staticmethod
    def matcher(types: typing.Iterable[typing.Union[str, "MediaType"]]) -> "Matcher":
        """
        :param types: The media types to match against.
        :return: A new :class:`Matcher` for the given types.
        """
        return Matcher(types)

    @property
    def type(self) -> str:
        return self._type

    @property
    def subtype(self) -> str:
        return self._subtype

    @property
    def params(self) -> typing.Mapping[str, str]:
        return self._params

    @property
    def name(self) -> str:
        """
        :return: ``type/subtype``, without parameters.
        """
        return "{}/{}".format(self._type, self._subtype)

    @property
    def quality(self) -> float:
        return self._quality

    @property
    def charset(self) -> typing.Optional[str]:
        return self._params.get("charset")

    @property
    def is_wildcard(self) -> bool:
        return self._type == "*" or self._subtype == "*" or self._subtype.startswith("*+")

    @property
    def is_text(self) -> bool:
        if self._type == "text":
            return True

        if self._subtype in _TEXT_SUBTYPES:
            return True

        return self._subtype.endswith("+json") or self._subtype.endswith("+xml")

    @property
    def specificity(self) -> int:
        """
        :return: 0 for concrete types, 1 for ``type/*``, 2 for ``*/*``.
        """
        if self._type == "*":
            return 2

        if self.is_wildcard:
            return 1

        return 0

    def matches(self, other: typing.Union[str, "MediaType"]) -> bool:
        """
        Checks if this media type matches another one. Parameters are ignored.

        The check is symmetric: ``a.matches(b) == b.matches(a)``.

        :param other: The media type to check against.
        """
        other = MediaType.valueof(other)

        if self._type == "*" or other._type == "*":
            return True

        if self._type != other._type:
            return False

        return _subtype_matches(self._subtype, other._subtype) or _subtype_matches(other._subtype, self._subtype)

    def with_params(self, **params) -> "MediaType":
        """
        :return: A copy of this media type with the given parameters added or replaced.
        """
        return MediaType(self._type, self._subtype, {**self._params, **params})

    def _key(self):
        params = tuple(sorted((k, v) for k, v in self._params.items() if k != "q"))
        return self._type, self._subtype, params

    def __eq__(self, other):
        if not isinstance(other, MediaType):
            return NotImplemented

        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __str__(self):
        if not self._params:
            return self.name

        params = "; ".join("{}={}".format(k, v) for k, v in self._params.items())
        return "{}; {}".format(self.name, params)

    def __repr__(self):
        return "<MediaType {}>".format(self)


class Matcher(object):
    """
    Matches candidate media types against a fixed list of types.
    """

    def __init__(self, types: typing.Iterable[typing.Union[str, MediaType]]):
        self.types = tuple(MediaType.valueof(t) for t in types)

    def matches(self, candidate: typing.Union[str, MediaType]) -> bool:
        """
        :return: If the candidate matches any of the types of this matcher.
        """
        candidate = MediaType.valueof(candidate)
        return any(t.matches(candidate) for t in self.types)

    def first(self, candidates: typing.Iterable[typing.Union[str, MediaType]]) -> typing.Optional[MediaType]:
        """
        :return: The first candidate that matches, or None.
        """
        for candidate in candidates:
            candidate = MediaType.valueof(candidate)
            if self.matches(candidate):
                return candidate

        return None

    def filter(self, candidates: typing.Iterable[typing.Union[str, MediaType]]) -> typing.List[MediaType]:
        """
        :return: Every candidate that matches, in order.
        """
        return [c for c in map(MediaType.valueof, candidates) if self.matches(c)]


def acceptable(accepted: typing.Iterable[MediaType],
               declared: typing.Iterable[MediaType]) -> typing.Iterator[typing.Tuple[MediaType, MediaType]]:
    """
    Yields every ``(accepted, declared)`` pair that matches, in order of preference.

    Accepted types with ``q=0`` never match. They refuse the concrete declared types they match, unless the
    accepted type that matched is more specific than the refusal, so ``text/html;q=0, */*`` refuses html while
    ``*/*;q=0, text/html`` does not.

    :param accepted: The accepted types, most preferred first (see :meth:`MediaType.parse`).
    :param declared: The types something can produce or read.
    """
    accepted = list(accepted)
    declared = list(declared)
    refused = [t for t in accepted if t.quality <= 0]

    for accept in accepted:
        if accept.quality <= 0:
            continue

        for candidate in declared:
            if not accept.matches(candidate):
                continue

            if not candidate.is_wildcard and any(r.matches(candidate) and r.specificity <= accept.specificity
                                                 for r in refused):
                continue

            yield accept, candidate


ALL = MediaType("*", "*")
TEXT = MediaType("text", "*")
PLAIN = MediaType("text", "plain")
HTML = MediaType("text", "html")
CSS = MediaType("text", "css")
JS = MediaType("application", "javascript")
JSON = MediaType("application", "json")
XML = MediaType("application", "xml")
FORM = MediaType("application", "x-www-form-urlencoded")
MULTIPART = MediaType("multipart", "form-data")
OCTETSTREAM = MediaType("application", "octet-stream")

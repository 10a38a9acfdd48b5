"""Path template compiler.

Templates use the path-to-regexp 1.x dialect common to Express-style routers:

``:name``
    named parameter matching one segment (``[^/]+?``).
``:name(\\d+)``
    named parameter with a custom pattern.
``(\\d+)``
    unnamed parameter, keyed by position (``0``, ``1``, ...).
``?`` / ``*`` / ``+``
    modifiers: optional, zero-or-more, one-or-more. Repeated parameters take
    a list/tuple whose items are joined with the delimiter.
``*``
    bare asterisk: unnamed catch-all (``.*``).
``\\:``
    escapes a literal character.

A ``/`` or ``.`` immediately preceding a parameter is its *prefix*: it is
emitted only when the parameter has a value, so ``/users/:id?`` builds
``/users`` when ``id`` is absent. ``None`` and the empty string both count as
absent, whether or not values are validated; repeated items follow the same
rule.
``compile_template`` returns a :class:`CompiledTemplate`: calling it builds a
concrete path from a mapping of parameters (the reverse direction);
``regex``/``match`` give the forward matcher for the same tokens.

Nothing is cached: a template is parsed every time it is compiled.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
from urllib.parse import quote, unquote

from smartreverse.exceptions import (
    InvalidParameterError,
    MissingParameterError,
    TemplateSyntaxError,
)

__all__ = ["Token", "CompiledTemplate", "parse", "compile_template"]

DEFAULT_DELIMITER = "/"

_PATH_REGEXP = re.compile(
    r"(\\.)"
    r"|([/.])?(?:(?::(\w+)(?:\(((?:\\.|[^\\()])+)\))?|\(((?:\\.|[^\\()])+)\))([+*?])?|(\*))",
    re.ASCII,
)
_GROUP_SPECIALS = re.compile(r"([=!:$/()])")
_STRAY_CHARS = ("(", ")", ":")

# encodeURIComponent / encodeURI equivalents
_COMPONENT_SAFE = "!'()*"
_ASTERISK_SAFE = "/;,:@&=+$!'()*"


@dataclass(frozen=True)
class Token:
    """A parameter placeholder inside a template."""

    name: Union[str, int]
    prefix: str
    delimiter: str
    optional: bool
    repeat: bool
    partial: bool
    asterisk: bool
    pattern: str


TemplatePart = Union[str, Token]


def parse(template: str) -> List[TemplatePart]:
    """Split ``template`` into literal strings and :class:`Token` objects.

    Raises:
        TemplateSyntaxError: stray ``(``, ``)`` or ``:``, duplicated
            parameter names, non-string templates.
    """
    if not isinstance(template, str):
        raise TemplateSyntaxError(
            f"Path template must be a string, got {type(template).__name__}"
        )
    tokens: List[TemplatePart] = []
    seen: set[Union[str, int]] = set()
    key = 0
    index = 0
    path = ""
    for match in _PATH_REGEXP.finditer(template):
        literal = template[index : match.start()]
        _check_literal(template, literal)
        path += literal
        index = match.end()
        escaped = match.group(1)
        if escaped:
            path += escaped[1]
            continue

        following = template[index] if index < len(template) else ""
        prefix, name, capture, group, modifier, asterisk = match.group(2, 3, 4, 5, 6, 7)

        if path:
            tokens.append(path)
            path = ""

        if name is None:
            token_name: Union[str, int] = key
            key += 1
        else:
            token_name = name
        if token_name in seen:
            raise TemplateSyntaxError(
                f"Duplicate parameter {token_name!r} in path template {template!r}"
            )
        seen.add(token_name)

        delimiter = prefix or DEFAULT_DELIMITER
        pattern = capture or group
        if pattern:
            pattern = _GROUP_SPECIALS.sub(r"\\\1", pattern)
        elif asterisk:
            pattern = ".*"
        else:
            pattern = f"[^{re.escape(delimiter)}]+?"
        _check_pattern(template, token_name, pattern)

        tokens.append(
            Token(
                name=token_name,
                prefix=prefix or "",
                delimiter=delimiter,
                optional=modifier in ("?", "*"),
                repeat=modifier in ("+", "*"),
                partial=bool(prefix is not None and following and following != prefix),
                asterisk=bool(asterisk),
                pattern=pattern,
            )
        )

    tail = template[index:]
    _check_literal(template, tail)
    path += tail
    if path:
        tokens.append(path)
    return tokens


def _check_literal(template: str, literal: str) -> None:
    for char in _STRAY_CHARS:
        if char in literal:
            if char == ":":
                reason = "':' must be followed by a parameter name"
            else:
                reason = f"unbalanced or empty group near {char!r}"
            raise TemplateSyntaxError(f"Malformed path template {template!r}: {reason}")


def _check_pattern(template: str, name: Union[str, int], pattern: str) -> None:
    try:
        re.compile(pattern)
    except re.error as exc:
        raise TemplateSyntaxError(
            f"Invalid pattern for parameter {name!r} in path template {template!r}: {exc}"
        ) from exc


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value)


def _encode(value: Any, *, asterisk: bool = False) -> str:
    return quote(str(value), safe=_ASTERISK_SAFE if asterisk else _COMPONENT_SAFE)


class CompiledTemplate:
    """Parsed template exposing a builder (``__call__``) and a matcher (``match``)."""

    __slots__ = ("template", "tokens", "_validators")

    def __init__(self, template: str, tokens: List[TemplatePart]):
        self.template = template
        self.tokens: Tuple[TemplatePart, ...] = tuple(tokens)
        self._validators: Dict[Union[str, int], re.Pattern] = {
            token.name: re.compile(f"^(?:{token.pattern})$")
            for token in self.tokens
            if isinstance(token, Token)
        }

    def __repr__(self) -> str:
        return f"CompiledTemplate({self.template!r})"

    @property
    def keys(self) -> Tuple[Token, ...]:
        return tuple(token for token in self.tokens if isinstance(token, Token))

    # ------------------------------------------------------------------
    # Reverse direction
    # ------------------------------------------------------------------
    def build(self, params: Optional[Mapping[Any, Any]] = None, *, validate: bool = True) -> str:
        """Substitute ``params`` into the template.

        Raises:
            MissingParameterError: a required parameter is absent, ``None`` or
                ``""``.
            InvalidParameterError: a value does not match its pattern (only
                when ``validate`` is true) or has the wrong arity.
            TypeError: ``params`` is not a mapping.
        """
        if params is None:
            params = {}
        if not isinstance(params, Mapping):
            raise TypeError(
                f"Template parameters must be a mapping, got {type(params).__name__}"
            )
        path = ""
        for token in self.tokens:
            if isinstance(token, str):
                path += token
                continue

            value = params.get(token.name)
            if _is_blank(value):
                if token.optional:
                    if token.partial:
                        path += token.prefix
                    continue
                raise MissingParameterError(token.name)

            if isinstance(value, (list, tuple)):
                if not token.repeat:
                    raise InvalidParameterError(
                        f'Expected "{token.name}" to not repeat, but received a sequence'
                    )
                if not value:
                    if token.optional:
                        continue
                    raise InvalidParameterError(f'Expected "{token.name}" to not be empty')
                for position, item in enumerate(value):
                    if _is_blank(item):
                        raise MissingParameterError(f"{token.name}[{position}]")
                    segment = _encode(item)
                    if validate:
                        self._validate(token, segment)
                    path += (token.prefix if position == 0 else token.delimiter) + segment
                continue

            segment = _encode(value, asterisk=token.asterisk)
            if validate:
                self._validate(token, segment)
            path += token.prefix + segment
        return path

    __call__ = build

    def _validate(self, token: Token, segment: str) -> None:
        if not self._validators[token.name].match(segment):
            raise InvalidParameterError(
                f'Expected "{token.name}" to match "{token.pattern}", but received "{segment}"'
            )

    # ------------------------------------------------------------------
    # Forward direction
    # ------------------------------------------------------------------
    def regex(
        self,
        *,
        strict: bool = False,
        end: bool = True,
        sensitive: bool = False,
    ) -> re.Pattern:
        """Return a regular expression matching concrete paths for this template."""
        route = ""
        for token in self.tokens:
            if isinstance(token, str):
                route += re.escape(token)
                continue
            prefix = re.escape(token.prefix)
            capture = f"(?:{token.pattern})"
            if token.repeat:
                capture += f"(?:{prefix}{capture})*"
            if token.optional:
                if not token.partial:
                    capture = f"(?:{prefix}({capture}))?"
                else:
                    capture = f"{prefix}({capture})?"
            else:
                capture = f"{prefix}({capture})"
            route += capture

        delimiter = re.escape(DEFAULT_DELIMITER)
        ends_with_delimiter = route.endswith(delimiter)
        if not strict:
            if ends_with_delimiter:
                route = route[: -len(delimiter)]
            route += f"(?:{delimiter}(?=$))?"
        if end:
            route += "$"
        elif not (strict and ends_with_delimiter):
            route += f"(?={delimiter}|$)"
        return re.compile(f"^{route}", 0 if sensitive else re.IGNORECASE)

    def match(self, path: str, **options: Any) -> Optional[Dict[Union[str, int], Any]]:
        """Return decoded parameters when ``path`` matches, else ``None``."""
        found = self.regex(**options).match(path)
        if found is None:
            return None
        params: Dict[Union[str, int], Any] = {}
        for token, raw in zip(self.keys, found.groups()):
            if raw is None:
                continue
            if token.repeat:
                params[token.name] = [unquote(item) for item in raw.split(token.delimiter)]
            else:
                params[token.name] = unquote(raw)
        return params


def compile_template(template: str) -> CompiledTemplate:
    """Parse ``template`` and return its builder/matcher."""
    return CompiledTemplate(template, parse(template))

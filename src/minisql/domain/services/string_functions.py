"""String function library.

Pure functions from values to a value. Arguments are converted to text
(or to integers for counts and positions) before use, and a Null argument
makes the result Null. CONCAT_WS is the exception: it skips Null arguments
after the separator.

| Function                  | Result                                            |
|---------------------------|---------------------------------------------------|
| CONCAT(a, ...)            | arguments joined                                  |
| CONCAT_WS(sep, a, ...)    | non-null arguments joined by ``sep``              |
| SUBSTRING(s, pos[, len])  | 1-based slice; negative ``pos`` counts from end   |
| REPLACE(s, find, repl)    | every occurrence replaced, case-sensitive         |
| REVERSE(s)                | characters in reverse order                       |
| CHAR_LENGTH(s)            | number of characters                              |
| UPPER(s) / LOWER(s)       | case conversion                                   |
| LEFT(s, n) / RIGHT(s, n)  | first / last ``n`` characters                     |
| REPEAT(s, n)              | ``s`` repeated ``n`` times                        |
| TRIM([pos] [c FROM] s)    | ``c`` (default space) stripped from the ends      |
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from minisql.domain.errors import InvalidStatementError, UnknownFunctionError
from minisql.domain.value_objects import to_int, to_text

_OMITTED = object()


def concat(*args: Any) -> str | None:
    texts = [to_text(arg) for arg in args]
    if any(text is None for text in texts):
        return None
    return "".join(texts)  # type: ignore[arg-type]


def concat_ws(separator: Any, *args: Any) -> str | None:
    sep = to_text(separator)
    if sep is None:
        return None
    return sep.join(text for text in map(to_text, args) if text is not None)


def substring(value: Any, start: Any, length: Any = _OMITTED) -> str | None:
    text = to_text(value)
    pos = to_int(start)
    if text is None or pos is None:
        return None
    if pos > 0:
        begin = pos - 1
    elif pos < 0:
        begin = len(text) + pos
        if begin < 0:
            return ""
    else:
        return ""
    if begin >= len(text):
        return ""

    if length is _OMITTED:
        return text[begin:]
    count = to_int(length)
    if count is None:
        return None
    if count <= 0:
        return ""
    return text[begin : begin + count]


def replace(value: Any, find: Any, replacement: Any) -> str | None:
    text, old, new = to_text(value), to_text(find), to_text(replacement)
    if text is None or old is None or new is None:
        return None
    if old == "":
        return text
    return text.replace(old, new)


def reverse(value: Any) -> str | None:
    text = to_text(value)
    return None if text is None else text[::-1]


def char_length(value: Any) -> int | None:
    text = to_text(value)
    return None if text is None else len(text)


def upper(value: Any) -> str | None:
    text = to_text(value)
    return None if text is None else text.upper()


def lower(value: Any) -> str | None:
    text = to_text(value)
    return None if text is None else text.lower()


def left(value: Any, n: Any) -> str | None:
    text, count = to_text(value), to_int(n)
    if text is None or count is None:
        return None
    return text[: max(count, 0)]


def right(value: Any, n: Any) -> str | None:
    text, count = to_text(value), to_int(n)
    if text is None or count is None:
        return None
    if count <= 0:
        return ""
    return text[-count:]


def repeat(value: Any, n: Any) -> str | None:
    text, count = to_text(value), to_int(n)
    if text is None or count is None:
        return None
    return text * max(count, 0)


def trim(value: Any, chars: Any = " ", position: str = "BOTH") -> str | None:
    """Strip whole occurrences of ``chars`` from the chosen end(s)."""
    text, remove = to_text(value), to_text(chars)
    if text is None or remove is None:
        return None
    if remove == "":
        return text
    position = position.upper()
    if position in ("LEADING", "BOTH"):
        while text.startswith(remove):
            text = text[len(remove) :]
    if position in ("TRAILING", "BOTH"):
        while text.endswith(remove):
            text = text[: -len(remove)]
    return text


@dataclass(frozen=True)
class StringFunction:
    """A library entry with its accepted argument counts."""

    name: str
    impl: Callable[..., Any]
    min_args: int
    max_args: int | None

    def __call__(self, args: list[Any], **options: Any) -> Any:
        if len(args) < self.min_args or (
            self.max_args is not None and len(args) > self.max_args
        ):
            raise InvalidStatementError(
                f"Incorrect parameter count in the call to native function '{self.name}'"
            )
        return self.impl(*args, **options)


_LIBRARY: dict[str, StringFunction] = {
    fn.name: fn
    for fn in (
        StringFunction("CONCAT", concat, 1, None),
        StringFunction("CONCAT_WS", concat_ws, 2, None),
        StringFunction("SUBSTRING", substring, 2, 3),
        StringFunction("REPLACE", replace, 3, 3),
        StringFunction("REVERSE", reverse, 1, 1),
        StringFunction("CHAR_LENGTH", char_length, 1, 1),
        StringFunction("UPPER", upper, 1, 1),
        StringFunction("LOWER", lower, 1, 1),
        StringFunction("LEFT", left, 2, 2),
        StringFunction("RIGHT", right, 2, 2),
        StringFunction("REPEAT", repeat, 2, 2),
        StringFunction("TRIM", trim, 1, 2),
    )
}

_ALIASES = {
    "SUBSTR": "SUBSTRING",
    "MID": "SUBSTRING",
    "CHARACTER_LENGTH": "CHAR_LENGTH",
    "LENGTH": "CHAR_LENGTH",
    "UCASE": "UPPER",
    "LCASE": "LOWER",
}


def canonical_name(name: str) -> str:
    upper_name = name.upper()
    return _ALIASES.get(upper_name, upper_name)


def lookup(name: str) -> StringFunction:
    """Find a library function by SQL name.

    Raises:
        UnknownFunctionError: If the name is not in the library.
    """
    fn = _LIBRARY.get(canonical_name(name))
    if fn is None:
        raise UnknownFunctionError(f"FUNCTION {name.upper()} does not exist")
    return fn

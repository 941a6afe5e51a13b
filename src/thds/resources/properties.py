"""Reading and writing the `.properties` file format.

We follow java.util.Properties exactly, so that a file written for (or by) a
JVM application parses identically here:

- bytes are ISO-8859-1; anything else must be written as `\\uXXXX`.
- `#` and `!` start comment lines (only at the start of a line).
- a line ending in an odd number of backslashes continues onto the next,
  whose leading whitespace is dropped.
- the key ends at the first unescaped `=`, `:` or whitespace; whitespace and
  at most one `=` or `:` separate it from the value.
- trailing whitespace in a value is significant.
- later duplicate keys replace earlier ones.
"""
import re
import string
import typing as ty

from .errors import PropertiesDecodeError

ENCODING = "iso-8859-1"
_WHITESPACE = " \t\f"
_SEPARATORS = "=:"
_NEWLINES = re.compile(r"\r\n|\r|\n")
# not str.splitlines, which also splits on \f, \v, \x1c-\x1e and \x85.
_UNESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_ESCAPES = {"\\": "\\\\", "\t": "\\t", "\n": "\\n", "\r": "\\r", "\f": "\\f"}
_SPECIALS = "=:#!"


def _continues(line: str) -> bool:
    return (len(line) - len(line.rstrip("\\"))) % 2 == 1


def _logical_lines(text: str) -> ty.Iterator[ty.Tuple[int, str]]:
    natural = _NEWLINES.split(text)
    i = 0
    while i < len(natural):
        lineno = i + 1
        line = natural[i].lstrip(_WHITESPACE)
        i += 1
        if not line or line[0] in "#!":
            continue
        while _continues(line):
            line = line[:-1]
            if i >= len(natural):
                break
            line += natural[i].lstrip(_WHITESPACE)
            i += 1
        yield lineno, line


def _split_key_value(line: str) -> ty.Tuple[str, str]:
    key_end = value_start = len(line)
    has_sep = False
    escaped = False
    for idx, c in enumerate(line):
        if escaped:
            escaped = False
        elif c == "\\":
            escaped = True
        elif c in _SEPARATORS or c in _WHITESPACE:
            key_end, value_start, has_sep = idx, idx + 1, c in _SEPARATORS
            break

    while value_start < len(line):
        c = line[value_start]
        if c not in _WHITESPACE:
            if has_sep or c not in _SEPARATORS:
                break
            has_sep = True
        value_start += 1
    return line[:key_end], line[value_start:]


def _join_surrogates(s: str) -> str:
    # characters outside the BMP arrive as two \u-escaped UTF-16 code units.
    return s.encode("utf-16", "surrogatepass").decode("utf-16", "surrogatepass")


def _unescape(s: str, source: str, lineno: int) -> str:
    out: ty.List[str] = []
    i = 0
    while i < len(s):
        c = s[i]
        i += 1
        if c != "\\":
            out.append(c)
            continue
        if i >= len(s):
            break
        c = s[i]
        i += 1
        if c == "u":
            hex_digits = s[i : i + 4]
            if len(hex_digits) < 4 or any(h not in string.hexdigits for h in hex_digits):
                raise PropertiesDecodeError("Malformed \\uxxxx encoding.", source, lineno)
            out.append(chr(int(hex_digits, 16)))
            i += 4
        else:
            out.append(_UNESCAPES.get(c, c))
    result = "".join(out)
    return _join_surrogates(result) if any("\ud800" <= ch <= "\udfff" for ch in result) else result


def loads(text: str, *, source: str = "") -> ty.Dict[str, str]:
    """Parse already-decoded text. `source` is only used in error messages."""
    props: ty.Dict[str, str] = dict()
    for lineno, line in _logical_lines(text):
        key, value = _split_key_value(line)
        props[_unescape(key, source, lineno)] = _unescape(value, source, lineno)
    return props


def load(stream_or_bytes: ty.Union[bytes, ty.IO[bytes]], *, source: str = "") -> ty.Dict[str, str]:
    """Does not close the stream."""
    data = stream_or_bytes if isinstance(stream_or_bytes, (bytes, bytearray)) else stream_or_bytes.read()
    return loads(bytes(data).decode(ENCODING), source=source)


def _unicode_escape(c: str) -> str:
    units = c.encode("utf-16-be", "surrogatepass")
    return "".join("\\u%04X" % int.from_bytes(units[i : i + 2], "big") for i in range(0, len(units), 2))


def _escape_char(c: str) -> str:
    if c in _ESCAPES:
        return _ESCAPES[c]
    if c in _SPECIALS:
        return "\\" + c
    return c if " " <= c <= "~" else _unicode_escape(c)


def _escape(s: str, is_key: bool) -> str:
    escaped = []
    for idx, c in enumerate(s):
        if c == " " and (is_key or idx == 0):
            escaped.append("\\ ")
        else:
            escaped.append(_escape_char(c))
    return "".join(escaped)


def dumps(props: ty.Mapping[str, str], *, comment: str = "") -> str:
    """ASCII-only output, which is therefore also valid ISO-8859-1."""
    lines = [
        "#" + "".join(c if " " <= c <= "~" else _unicode_escape(c) for c in line)
        for line in comment.splitlines()
    ]
    lines.extend(f"{_escape(str(k), True)}={_escape(str(v), False)}" for k, v in props.items())
    return "".join(line + "\n" for line in lines)


def dump(props: ty.Mapping[str, str], stream: ty.IO[bytes], *, comment: str = "") -> None:
    stream.write(dumps(props, comment=comment).encode(ENCODING))

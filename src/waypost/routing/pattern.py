"""Path template compilation.

Turns a route template such as ``/posts/{id:num}/{slug}`` into an
anchored regular expression plus the ordered list of placeholder names.

Placeholder types::

    {id:num}    -> digits only
    {slug:str}  -> word characters, hyphen, underscore
    {name}      -> any character except "/" (same as {name:any})
    {rest:all}  -> anything, including "/"

A placeholder followed by ``?`` is optional together with the separator
in front of it, so ``/foo/{bar}?`` matches both ``/foo`` and ``/foo/x``.
"""

import re
from dataclasses import dataclass
from urllib.parse import unquote

from waypost.errors import ConfigurationError

# regex fragment for each placeholder type
PLACEHOLDER_TYPES: dict[str, str] = {
    "num": r"\d+",
    "str": r"[\w\-_]+",
    "any": r"[^/]+",
    "all": r".*",
}

DEFAULT_TYPE = "any"

_PLACEHOLDER_RE = re.compile(r"\{(?P<inner>[^{}]*)\}(?P<optional>\?)?")
_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


@dataclass(frozen=True, slots=True)
class Placeholder:
    """A typed placeholder inside a path template.

    ``separator`` holds the ``/`` absorbed by an optional placeholder;
    it is emitted only when a value is supplied.
    """

    name: str
    type: str = DEFAULT_TYPE
    optional: bool = False
    separator: str = ""


@dataclass(frozen=True, slots=True)
class CompiledPath:
    """A compiled path template.

    ``segments`` keeps the template as alternating literal strings and
    ``Placeholder`` objects, in order. URL reversal substitutes into it
    and never re-parses the regex.
    """

    template: str
    regex: re.Pattern[str]
    param_names: tuple[str, ...]
    segments: tuple[str | Placeholder, ...]

    @property
    def is_static(self) -> bool:
        """True when the template has no placeholders."""
        return not self.param_names

    def match(self, path: str) -> dict[str, str] | None:
        """Match a normalized path against the whole template.

        Returns the captured parameters in capture order, or ``None``.
        Optional placeholders that didn't participate are left out.
        """
        m = self.regex.fullmatch(path)
        if m is None:
            return None
        params: dict[str, str] = {}
        for name in self.param_names:
            value = m.group(name)
            if value is not None:
                params[name] = value
        return params


def normalize_template(template: str) -> str:
    """Give a registered template a leading slash and no trailing slash."""
    if not template.startswith("/"):
        template = f"/{template}"
    return template.rstrip("/") or "/"


def normalize_path(path: str) -> str:
    """Normalize a request path: percent-decode, strip the trailing slash.

    The root path stays ``/``.
    """
    return unquote(path).rstrip("/") or "/"


def parse_placeholder(inner: str, template: str) -> tuple[str, str]:
    """Split ``name`` or ``name:type`` and validate both halves."""
    if ":" in inner:
        name, param_type = inner.split(":", 1)
    else:
        name, param_type = inner, DEFAULT_TYPE
    name = name.strip()
    param_type = param_type.strip()

    if not _NAME_RE.fullmatch(name):
        msg = (
            f"Invalid placeholder name {name!r} in route {template!r}. "
            "Names must be valid identifiers, e.g. {post_id}."
        )
        raise ConfigurationError(msg)
    if param_type not in PLACEHOLDER_TYPES:
        allowed = ", ".join(PLACEHOLDER_TYPES)
        msg = (
            f"Unknown placeholder type {param_type!r} in route {template!r}. "
            f"Allowed types: {allowed}."
        )
        raise ConfigurationError(msg)
    return name, param_type


def compile_path(template: str, *, case_sensitive: bool = False) -> CompiledPath:
    """Compile a path template into an anchored, case-insensitive matcher.

    Literal text is escaped, so ``/feed.xml`` only matches a literal dot.

    Raises ``ConfigurationError`` for malformed placeholders, unknown
    placeholder types, duplicate names, or Flask-style ``<param>`` syntax.
    """
    if re.search(r"<[^<>/]+>", template):
        msg = (
            f"Route {template!r} uses <param> syntax. "
            "Waypost placeholders use {param} or {param:type}."
        )
        raise ConfigurationError(msg)

    pattern_parts: list[str] = []
    segments: list[str | Placeholder] = []
    names: list[str] = []
    pos = 0

    for m in _PLACEHOLDER_RE.finditer(template):
        literal = template[pos : m.start()]
        optional = m.group("optional") is not None
        name, param_type = parse_placeholder(m.group("inner"), template)

        if name in names:
            msg = f"Duplicate placeholder {name!r} in route {template!r}."
            raise ConfigurationError(msg)
        names.append(name)

        separator = ""
        # "/{slug}?" keeps its leading slash so the root path still matches
        if optional and literal.endswith("/") and (segments or len(literal) > 1):
            literal = literal[:-1]
            separator = "/"

        if literal:
            pattern_parts.append(re.escape(literal))
            segments.append(literal)

        capture = f"(?P<{name}>{PLACEHOLDER_TYPES[param_type]})"
        if optional:
            capture = f"(?:{re.escape(separator)}{capture})?"
        pattern_parts.append(capture)
        segments.append(
            Placeholder(name=name, type=param_type, optional=optional, separator=separator)
        )
        pos = m.end()

    tail = template[pos:]
    if tail:
        pattern_parts.append(re.escape(tail))
        segments.append(tail)

    flags = 0 if case_sensitive else re.IGNORECASE
    return CompiledPath(
        template=template,
        regex=re.compile("".join(pattern_parts), flags),
        param_names=tuple(names),
        segments=tuple(segments),
    )

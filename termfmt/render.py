"""
Type-dispatching value renderer.

Turns arbitrary Python values into readable text: atoms, numbers, strings, byte sequences,
lists, tuples, mappings, records (dataclasses), ranges, regex patterns, functions and opaque
runtime handles. Rendering is bounded by a shared element budget (`limit`) threaded through
every nested call, so siblings draw from one shrinking allowance.

Custom rules can be attached to exact types with register_rule(); faults raised by custom
rules are contained and reported as RuntimeWarning when `safe` is enabled.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import collections.abc as abc
import dataclasses
import inspect
import io
import math
import multiprocessing.process
import re
import socket
import subprocess
import threading
import types
import warnings
import weakref
from dataclasses import dataclass, field, fields, replace
from enum import StrEnum, unique
from typing import Any, Callable, Mapping, Self

# Local ----------------------------------------------------------------------------------------------------------------

from .algebra import (Doc, BreakMode, concat, container_doc, decrement, flex_glue, fold,
                      format_doc, group, nest, color)
from .atoms import ALIAS_PREFIX, Atom, AtomKind, inspect_atom
from .escape import REGEX_ESCAPES, escape, is_ascii_printable, is_printable
from .sentinels import UNSET, UnsetType, ifnotunset
from .utils import class_name, fmt_type, fmt_value

# Constants ------------------------------------------------------------------------------------------------------------

ANSI: dict[str, str] = {
    "reset": "\x1b[0m",
    "bright": "\x1b[1m",
    "faint": "\x1b[2m",
    "italic": "\x1b[3m",
    "underline": "\x1b[4m",
    "reverse": "\x1b[7m",
    "black": "\x1b[30m",
    "red": "\x1b[31m",
    "green": "\x1b[32m",
    "yellow": "\x1b[33m",
    "blue": "\x1b[34m",
    "magenta": "\x1b[35m",
    "cyan": "\x1b[36m",
    "white": "\x1b[37m",
    "light_black": "\x1b[90m",
    "light_red": "\x1b[91m",
    "light_green": "\x1b[92m",
    "light_yellow": "\x1b[93m",
    "light_blue": "\x1b[94m",
    "light_magenta": "\x1b[95m",
    "light_cyan": "\x1b[96m",
    "light_white": "\x1b[97m",
}

COLOR_CATEGORIES = frozenset({
    "atom", "binary", "boolean", "charlist", "list", "map",
    "nil", "number", "regex", "string", "tuple", "reset",
})

_RE_LETTERS = (
    (re.IGNORECASE, "i"),
    (re.MULTILINE, "m"),
    (re.DOTALL, "s"),
    (re.VERBOSE, "x"),
)
_RE_FLAG_ORDER = (re.ASCII, re.DEBUG, re.IGNORECASE, re.LOCALE, re.MULTILINE, re.DOTALL, re.VERBOSE, re.UNICODE)

_PID_TYPES = (threading.Thread, multiprocessing.process.BaseProcess)
_PORT_TYPES = (socket.socket, io.IOBase, subprocess.Popen)
_FUNCTION_TYPES = (types.FunctionType, types.BuiltinFunctionType, types.MethodType)

# Type to custom rule, exact type match only
_RULES: dict[type, Callable[[Any, "RenderOptions"], Any]] = {}


# Classes --------------------------------------------------------------------------------------------------------------

@unique
class Base(StrEnum):
    """Numeric base used for integers and bytes shown as numbers."""
    BINARY = "binary"
    DECIMAL = "decimal"
    HEX = "hex"
    OCTAL = "octal"


@unique
class BinaryMode(StrEnum):
    """How byte sequences render: always as strings, always as `<<...>>`, or by content."""
    AS_BINARIES = "as_binaries"
    AS_STRINGS = "as_strings"
    INFER = "infer"


@unique
class CharlistMode(StrEnum):
    """How lists of code points render: always as `~c"..."`, always as lists, or by content."""
    AS_CHARLISTS = "as_charlists"
    AS_LISTS = "as_lists"
    INFER = "infer"


@dataclass(frozen=True)
class RenderOptions:
    """
    Configuration for render() and to_doc().

    Attributes:
        limit: Remaining element budget, a non-negative int or math.inf ("infinity" accepted).
            Shared left-to-right across siblings; exhausted containers show "...".
        printable_limit: Maximum characters scanned and escaped for text, a non-negative int
            or math.inf. Longer text is cut and marked with ` <> ...` or ` ++ ...`.
        width: Line width used when pretty is enabled.
        pretty: Lay out to width; otherwise render on a single line.
        base: Numeric base, one of binary, octal, decimal, hex.
        binaries: BinaryMode for bytes and bytearray.
        charlists: CharlistMode for lists of ints.
        syntax_colors: Mapping of colour category to ANSI style name or raw escape sequence.
        custom_options: Free-form option bag; `sort_maps` sorts mapping keys.
        structs: Apply custom rules; when False records render structurally.
        safe: Contain exceptions raised by custom rules instead of propagating them.
        fully_qualified_names: Prefix record names with their module.

    Raises:
        TypeError: If a field has the wrong type.
        ValueError: If a field has an invalid value.

    Examples:
        >>> opts = RenderOptions(limit=3, base="hex")
        >>> opts.merge(limit="infinity").limit
        inf
    """
    limit: int | float = 50
    printable_limit: int | float = 4096
    width: int | float = 80
    pretty: bool = False
    base: Base | str = Base.DECIMAL
    binaries: BinaryMode | str = BinaryMode.INFER
    charlists: CharlistMode | str = CharlistMode.INFER
    syntax_colors: Mapping[str, str] = field(default_factory=dict)
    custom_options: Mapping[str, Any] = field(default_factory=dict)
    structs: bool = True
    safe: bool = True
    fully_qualified_names: bool = False

    def __post_init__(self):
        """Validate and normalize fields"""
        for name in ("limit", "printable_limit", "width"):
            object.__setattr__(self, name, _validate_bound(name, getattr(self, name)))

        for name in ("pretty", "structs", "safe", "fully_qualified_names"):
            if not isinstance(getattr(self, name), bool):
                raise TypeError(f"{name} must be bool, but found {fmt_type(getattr(self, name))}")

        for name, enum_type in (("base", Base), ("binaries", BinaryMode), ("charlists", CharlistMode)):
            value = getattr(self, name)
            try:
                object.__setattr__(self, name, enum_type(value))
            except ValueError:
                choices = ", ".join(repr(m.value) for m in enum_type)
                raise ValueError(f"{name} expected one of {choices}, but found {fmt_value(value)}") from None

        if not isinstance(self.syntax_colors, abc.Mapping):
            raise TypeError(f"syntax_colors must be a mapping, but found {fmt_type(self.syntax_colors)}")
        colors = {}
        for category, style in self.syntax_colors.items():
            if category not in COLOR_CATEGORIES:
                raise ValueError(f"unknown syntax color category {fmt_value(category)}")
            colors[category] = _resolve_style(category, style)
        object.__setattr__(self, "syntax_colors", colors)

        if not isinstance(self.custom_options, abc.Mapping):
            raise TypeError(f"custom_options must be a mapping, but found {fmt_type(self.custom_options)}")
        object.__setattr__(self, "custom_options", dict(self.custom_options))

    @classmethod
    def unbounded(cls) -> Self:
        """Options without element or printable limits."""
        return cls(limit=math.inf, printable_limit=math.inf)

    @classmethod
    def pretty_print(cls, width: int = 80) -> Self:
        """Options laying output out to the given line width."""
        return cls(pretty=True, width=width)

    def merge(self,
              *,
              limit: int | float | str | UnsetType = UNSET,
              printable_limit: int | float | str | UnsetType = UNSET,
              width: int | float | UnsetType = UNSET,
              pretty: bool | UnsetType = UNSET,
              base: Base | str | UnsetType = UNSET,
              binaries: BinaryMode | str | UnsetType = UNSET,
              charlists: CharlistMode | str | UnsetType = UNSET,
              syntax_colors: Mapping[str, str] | UnsetType = UNSET,
              custom_options: Mapping[str, Any] | UnsetType = UNSET,
              structs: bool | UnsetType = UNSET,
              safe: bool | UnsetType = UNSET,
              fully_qualified_names: bool | UnsetType = UNSET,
              **unknown,
              ) -> "RenderOptions":
        """
        Create a new RenderOptions instance with merged configuration options.

        Parameters not provided (UNSET) are inherited from the current instance.

        Returns:
            New RenderOptions instance with merged configuration.

        Raises:
            ValueError: If an option name is unknown.
        """
        if unknown:
            raise ValueError(f"unknown render option {next(iter(unknown))!r}")
        return RenderOptions(
            limit=ifnotunset(limit, default=self.limit),
            printable_limit=ifnotunset(printable_limit, default=self.printable_limit),
            width=ifnotunset(width, default=self.width),
            pretty=ifnotunset(pretty, default=self.pretty),
            base=ifnotunset(base, default=self.base),
            binaries=ifnotunset(binaries, default=self.binaries),
            charlists=ifnotunset(charlists, default=self.charlists),
            syntax_colors=ifnotunset(syntax_colors, default=self.syntax_colors),
            custom_options=ifnotunset(custom_options, default=self.custom_options),
            structs=ifnotunset(structs, default=self.structs),
            safe=ifnotunset(safe, default=self.safe),
            fully_qualified_names=ifnotunset(fully_qualified_names, default=self.fully_qualified_names),
        )

    @property
    def layout_width(self) -> int | float:
        return self.width if self.pretty else math.inf


# Methods --------------------------------------------------------------------------------------------------------------

def render(value: Any, options: RenderOptions | Mapping[str, Any] | None = None, **overrides) -> str:
    """
    Render a value as readable text.

    Args:
        value: Any value.
        options: RenderOptions or mapping of option overrides.
        **overrides: Option overrides applied last.

    Returns:
        The rendered text.

    Examples:
        >>> render([1, 2, 3])
        '[1, 2, 3]'
        >>> render({Atom("a"): 1, "b": (True, None)})
        '%{:a => 1, "b" => {true, nil}}'
        >>> render(list(range(5)), limit=2)
        '[0, 1, ...]'
        >>> render(-255, base="hex")
        '-0xff'
    """
    opts = _coerce_options(options)
    if overrides:
        opts = opts.merge(**overrides)
    doc, _ = to_doc(value, opts)
    return format_doc(doc, opts.layout_width)


def to_doc(value: Any, options: RenderOptions | Mapping[str, Any] | None = None) -> tuple[Doc, RenderOptions]:
    """
    Convert a value to a document, returning it with the options left after rendering.

    Rules returning a bare document cost one unit of `limit`; rules returning
    `(doc, options)` report their own consumption.
    """
    opts = _coerce_options(options)

    rule = _RULES.get(type(value)) if opts.structs else None
    if rule is not None:
        try:
            result = rule(value, opts)
        except Exception as exc:
            if not opts.safe:
                raise
            warnings.warn(f"render rule for {fmt_type(value)} failed with {type(exc).__name__}: {exc}; "
                          f"falling back to structural rendering",
                          RuntimeWarning, stacklevel=2)
            result = _render_structural(value, opts)
    else:
        result = _builtin_rule(value)(value, opts)

    if isinstance(result, tuple):
        return result
    return result, replace(opts, limit=decrement(opts.limit))


def register_rule(cls: type, rule: Callable[[Any, RenderOptions], Any]) -> None:
    """
    Attach a custom rule to an exact type.

    The rule receives `(value, options)` and returns a document or `(doc, options)`.
    Subclasses do not inherit rules.

    Raises:
        TypeError: If cls is not a type or rule is not callable.
    """
    if not isinstance(cls, type):
        raise TypeError(f"cls must be a type, but found {fmt_type(cls)}")
    if not callable(rule):
        raise TypeError(f"rule must be callable, but found {fmt_type(rule)}")
    _RULES[cls] = rule


def unregister_rule(cls: type) -> None:
    """Remove a custom rule, if one is registered for cls."""
    if not isinstance(cls, type):
        raise TypeError(f"cls must be a type, but found {fmt_type(cls)}")
    _RULES.pop(cls, None)


def get_rule(cls: type) -> Callable[[Any, RenderOptions], Any] | None:
    """Get the custom rule registered for exactly cls, or None."""
    return _RULES.get(cls)


def color_doc(doc: Doc, category: str, options: RenderOptions) -> Doc:
    """Colour doc when options.syntax_colors maps category."""
    escape_seq = options.syntax_colors.get(category)
    if escape_seq is None:
        return doc
    return color(doc, escape_seq, options.syntax_colors.get("reset", ANSI["reset"]))


def keyword_doc(pair: tuple[Atom, Any], options: RenderOptions) -> tuple[Doc, RenderOptions]:
    """Render a `(key, value)` pair as `key: value`."""
    key, value = pair
    key_doc = color_doc(inspect_atom(key, AtomKind.KEY), "atom", options)
    value_doc, options = to_doc(value, options)
    return concat(key_doc, " ", value_doc), options


def is_keyword(items: abc.Iterable) -> bool:
    """
    Check whether every item is a 2-tuple keyed by a non-alias Atom.

    Empty input is a keyword list.
    """
    for item in items:
        if not (isinstance(item, tuple) and len(item) == 2):
            return False
        key = item[0]
        if not isinstance(key, Atom) or key.is_alias:
            return False
    return True


def record_doc(value: Any, name: str, field_names: list[str], options: RenderOptions,
               *, opaque: bool = False) -> tuple[Doc, RenderOptions]:
    """
    Render selected fields of a record.

    Reconstructible records render as `%Name{a: 1}`, opaque ones as `#Name<a: 1, ...>`.
    """
    def fun(item, opts):
        if item is ...:
            return "..."
        return keyword_doc((Atom(item), getattr(value, item)), opts)

    sep = color_doc(",", "map", options)
    if opaque:
        left = color_doc(f"#{name}<", "map", options)
        right = color_doc(">", "map", options)
        return container_doc(left, list(field_names) + [...], right, options, fun,
                             separator=sep, break_mode=BreakMode.STRICT)

    left = color_doc(f"%{name}{{", "map", options)
    right = color_doc("}", "map", options)
    return container_doc(left, list(field_names), right, options, fun,
                         separator=sep, break_mode=BreakMode.STRICT)


# Private Methods ------------------------------------------------------------------------------------------------------

def _coerce_options(options: Any) -> RenderOptions:
    if options is None:
        return RenderOptions()
    if isinstance(options, RenderOptions):
        return options
    if isinstance(options, abc.Mapping):
        return RenderOptions().merge(**options)
    raise TypeError(f"options must be RenderOptions or mapping, but found {fmt_type(options)}")


def _validate_bound(name: str, value: Any) -> int | float:
    if value == "infinity" or value == math.inf:
        return math.inf
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be int or 'infinity', but found {fmt_type(value)}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative, but found {fmt_value(value)}")
    return value


def _resolve_style(category: str, style: Any) -> str:
    if not isinstance(style, str):
        raise TypeError(f"style for {category!r} must be str, but found {fmt_type(style)}")
    if style in ANSI:
        return ANSI[style]
    if style.startswith("\x1b["):
        return style
    raise ValueError(f"unknown style {fmt_value(style)} for syntax color category {category!r}")


def _builtin_rule(value: Any) -> Callable[[Any, RenderOptions], Any]:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _render_record
    for klass in type(value).__mro__:
        rule = _BUILTIN_RULES.get(klass)
        if rule is not None:
            return rule
    if isinstance(value, abc.Mapping):
        return _render_mapping
    if isinstance(value, _FUNCTION_TYPES):
        return _render_function
    if isinstance(value, _PID_TYPES):
        return _opaque_handle("#PID")
    if isinstance(value, _PORT_TYPES):
        return _opaque_handle("#Port")
    if isinstance(value, weakref.ref):
        return _opaque_handle("#Reference")
    return _render_repr


def _render_structural(value: Any, options: RenderOptions) -> Doc | tuple[Doc, RenderOptions]:
    """Fallback for values whose custom rule failed"""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _struct_as_map(value, options)
    return _render_repr(value, options)


def _struct_as_map(value: Any, options: RenderOptions) -> tuple[Doc, RenderOptions]:
    name = class_name(value, fully_qualified=options.fully_qualified_names)
    items = [(Atom("__struct__"), Atom(ALIAS_PREFIX + name))]
    items.extend((Atom(f.name), getattr(value, f.name)) for f in fields(value))
    return _map_container(items, options, keyword_doc)


def _render_nil(value: None, options: RenderOptions) -> Doc:
    return color_doc("nil", "nil", options)


def _render_bool(value: bool, options: RenderOptions) -> Doc:
    return color_doc("true" if value else "false", "boolean", options)


def _render_atom(value: Atom, options: RenderOptions) -> Doc:
    return color_doc(inspect_atom(value), "atom", options)


def _format_int(value: int, base: Base) -> str:
    if base is Base.DECIMAL:
        return str(value)
    prefix, spec = {Base.BINARY: ("0b", "b"), Base.OCTAL: ("0o", "o"), Base.HEX: ("0x", "x")}[base]
    sign = "-" if value < 0 else ""
    return sign + prefix + format(abs(value), spec)


def _render_int(value: int, options: RenderOptions) -> Doc:
    return color_doc(_format_int(value, options.base), "number", options)


def _render_float(value: float, options: RenderOptions) -> Doc:
    magnitude = abs(value)
    if 1.0 <= magnitude < 1.0e16 and value.is_integer():
        text = f"{int(value)}.0"
    else:
        text = repr(value)
    return color_doc(text, "number", options)


def _quoted(text: str, options: RenderOptions, *, surrogate_bytes: bool = False) -> Doc:
    escaped, rest = escape(text, '"', options.printable_limit, surrogate_bytes=surrogate_bytes)
    literal = f'"{escaped}"' if not rest else f'"{escaped}" <> ...'
    return color_doc(literal, "string", options)


def _render_str(value: str, options: RenderOptions) -> Doc | tuple[Doc, RenderOptions]:
    if options.binaries is BinaryMode.AS_BINARIES:
        return _render_bitstring(value.encode("utf-8"), options)
    return _quoted(value, options)


def _render_bytes(value: bytes | bytearray, options: RenderOptions) -> Doc | tuple[Doc, RenderOptions]:
    mode = options.binaries
    if mode is BinaryMode.AS_BINARIES:
        return _render_bitstring(bytes(value), options)

    text = bytes(value).decode("utf-8", "surrogateescape")
    if mode is BinaryMode.AS_STRINGS or (
            is_printable(text, options.printable_limit) and options.base is Base.DECIMAL):
        return _quoted(text, options, surrogate_bytes=True)
    return _render_bitstring(bytes(value), options)


def _render_bitstring(data: bytes, options: RenderOptions) -> Doc | tuple[Doc, RenderOptions]:
    if not data:
        return color_doc("<<>>", "binary", options)

    limit = options.limit
    docs = []
    for i, byte in enumerate(data):
        if limit - i <= 0:
            docs.append("...")
            break
        docs.append(_render_int(byte, options))
    joined = [concat(doc, ",") for doc in docs[:-1]] + [docs[-1]]
    inner = fold(joined, lambda doc, acc: flex_glue(doc, " ", acc))

    left = color_doc("<<", "binary", options)
    right = color_doc(">>", "binary", options)
    doc = group(concat(left, nest(inner, 2), right))
    new_limit = limit if limit == math.inf else max(0, limit - len(data))
    return doc, replace(options, limit=new_limit)


def _render_list(value: list, options: RenderOptions) -> Doc | tuple[Doc, RenderOptions]:
    if not value:
        return color_doc("[]", "list", options)

    mode = options.charlists
    if _is_chardata(value) and (
            mode is CharlistMode.AS_CHARLISTS
            or (mode is CharlistMode.INFER and is_ascii_printable(value, options.printable_limit))):
        escaped, rest = escape("".join(map(chr, value)), '"', options.printable_limit)
        literal = f'~c"{escaped}"' if not rest else f'~c"{escaped}" ++ ...'
        return color_doc(literal, "charlist", options)

    left = color_doc("[", "list", options)
    right = color_doc("]", "list", options)
    sep = color_doc(",", "list", options)
    if is_keyword(value):
        return container_doc(left, value, right, options, keyword_doc,
                             separator=sep, break_mode=BreakMode.STRICT)
    return container_doc(left, value, right, options, to_doc, separator=sep)


def _render_tuple(value: tuple, options: RenderOptions) -> tuple[Doc, RenderOptions]:
    left = color_doc("{", "tuple", options)
    right = color_doc("}", "tuple", options)
    sep = color_doc(",", "tuple", options)
    return container_doc(left, list(value), right, options, to_doc,
                         separator=sep, break_mode=BreakMode.FLEX)


def _render_mapping(value: Mapping, options: RenderOptions) -> tuple[Doc, RenderOptions]:
    items = list(value.items())
    if options.custom_options.get("sort_maps"):
        items = _sorted_terms(items, key=lambda item: item[0])

    if is_keyword(items):
        fun = keyword_doc
    else:
        arrow = color_doc(" => ", "map", options)

        def fun(item, opts):
            key_doc, _ = to_doc(item[0], opts)
            value_doc, opts = to_doc(item[1], opts)
            return concat(key_doc, arrow, value_doc), opts

    return _map_container(items, options, fun)


def _map_container(items: list, options: RenderOptions, fun: Callable) -> tuple[Doc, RenderOptions]:
    left = color_doc("%{", "map", options)
    right = color_doc("}", "map", options)
    sep = color_doc(",", "map", options)
    return container_doc(left, items, right, options, fun, separator=sep, break_mode=BreakMode.STRICT)


def _render_record(value: Any, options: RenderOptions) -> tuple[Doc, RenderOptions]:
    if not options.structs:
        return _struct_as_map(value, options)
    name = class_name(value, fully_qualified=options.fully_qualified_names)
    return record_doc(value, name, [f.name for f in fields(value)], options)


def _render_set(value: set | frozenset, options: RenderOptions) -> Doc | tuple[Doc, RenderOptions]:
    name = type(value).__name__
    if not value:
        return f"{name}()"
    items = list(value)
    if options.custom_options.get("sort_maps"):
        items = _sorted_terms(items)
    left = color_doc("[", "list", options)
    right = color_doc("]", "list", options)
    sep = color_doc(",", "list", options)
    doc, options = container_doc(left, items, right, options, to_doc, separator=sep)
    return concat(f"{name}(", doc, ")"), options


def _render_range(value: range, options: RenderOptions) -> Doc:
    first, step = value.start, value.step
    last = value[-1] if value else first - step
    first_doc, _ = to_doc(first, options)
    last_doc, _ = to_doc(last, options)
    if step == 1 and last >= first:
        return concat(first_doc, "..", last_doc)
    step_doc, _ = to_doc(step, options)
    return concat(first_doc, "..", last_doc, "//", step_doc)


def _render_pattern(value: re.Pattern, options: RenderOptions) -> Doc:
    flags = value.flags
    if isinstance(value.pattern, str):
        flags &= ~re.UNICODE

    letters = ""
    remaining = flags
    for flag, letter in _RE_LETTERS:
        if flags & flag:
            letters += letter
            remaining &= ~flag

    if remaining or isinstance(value.pattern, bytes):
        source_doc, _ = to_doc(value.pattern, options)
        names = [f"re.{flag.name}" for flag in _RE_FLAG_ORDER if flags & flag]
        if not names:
            return concat("re.compile(", source_doc, ")")
        return concat("re.compile(", source_doc, ", ", " | ".join(names), ")")

    escaped, _ = escape(_normalize_regex(value.pattern), "/", math.inf, REGEX_ESCAPES.get)
    return color_doc(f"~r/{escaped}/{letters}", "regex", options)


def _normalize_regex(source: str) -> str:
    """Unescape `\\/` and `\\#{` so the delimiter escape restores them verbatim"""
    out = []
    i, n = 0, len(source)
    while i < n:
        if source.startswith("\\\\", i):
            out.append("\\\\")
            i += 2
        elif source.startswith("\\/", i):
            out.append("/")
            i += 2
        elif source.startswith("\\#{", i):
            out.append("#{")
            i += 3
        else:
            out.append(source[i])
            i += 1
    return "".join(out)


def _render_function(value: Callable, options: RenderOptions) -> Doc:
    module = getattr(value, "__module__", None) or "builtins"
    name = getattr(value, "__name__", None) or "?"
    qualname = getattr(value, "__qualname__", None) or name
    arity = _arity(value)
    suffix = "" if arity is None else f"/{arity}"

    if qualname == name and name != "<lambda>" and not isinstance(value, types.MethodType):
        return f"&{module}.{name}{suffix}"
    return f"#Function<{qualname}{suffix} in {module}>"


def _arity(func: Callable) -> int | None:
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return None
    positional = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    return sum(1 for p in sig.parameters.values() if p.kind in positional)


def _opaque_handle(tag: str) -> Callable[[Any, RenderOptions], Doc]:
    def rule(value: Any, options: RenderOptions) -> Doc:
        text = repr(value)
        if not (text.startswith("<") and text.endswith(">")):
            text = f"<{text}>"
        return tag + text

    return rule


def _render_repr(value: Any, options: RenderOptions) -> Doc:
    try:
        return repr(value)
    except Exception as exc:
        if not options.safe:
            raise
        warnings.warn(f"repr of {fmt_type(value)} failed with {type(exc).__name__}: {exc}",
                      RuntimeWarning, stacklevel=3)
        return f"<{class_name(value)} object (repr failed: {type(exc).__name__})>"


def _is_chardata(value: list) -> bool:
    return all(isinstance(c, int) and not isinstance(c, bool) and 0 <= c <= 0x10FFFF for c in value)


def _term_rank(value: Any) -> int:
    """Sort rank across kinds: numbers, atoms, tuples, mappings, lists, text, anything else."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return 0
    if value is None or isinstance(value, (bool, Atom)):
        return 1
    if isinstance(value, tuple):
        return 2
    if isinstance(value, abc.Mapping):
        return 3
    if isinstance(value, list):
        return 4
    if isinstance(value, (str, bytes, bytearray)):
        return 5
    return 6


def _sorted_terms(items: list, key: Callable[[Any], Any] = lambda x: x) -> list:
    try:
        return sorted(items, key=lambda item: (_term_rank(key(item)), key(item)))
    except TypeError:
        return sorted(items, key=lambda item: (_term_rank(key(item)), repr(key(item))))


_BUILTIN_RULES: dict[type, Callable[[Any, RenderOptions], Any]] = {
    type(None): _render_nil,
    bool: _render_bool,
    Atom: _render_atom,
    int: _render_int,
    float: _render_float,
    str: _render_str,
    bytes: _render_bytes,
    bytearray: _render_bytes,
    list: _render_list,
    tuple: _render_tuple,
    dict: _render_mapping,
    set: _render_set,
    frozenset: _render_set,
    range: _render_range,
    re.Pattern: _render_pattern,
}

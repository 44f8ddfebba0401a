"""
Document algebra for laying out rendered values.

A small Wadler-style pretty-printer: documents are built from strings, concatenations,
nesting, breaks and groups, then laid out to a target width by format_doc(). Breaks come
in two kinds:

    - strict: inside a group that does not fit, every strict break becomes a newline;
    - flex: a flex break becomes a newline only when the next chunk would overflow.

Colour escapes are zero-width, so they never influence the layout.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import math
from dataclasses import dataclass, replace
from enum import StrEnum, unique
from typing import Any, Callable, Iterable, TypeAlias

# Classes --------------------------------------------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DocCons:
    left: "Doc"
    right: "Doc"


@dataclass(frozen=True, slots=True)
class DocNest:
    doc: "Doc"
    indent: int


@dataclass(frozen=True, slots=True)
class DocBreak:
    text: str = " "
    flex: bool = False


@dataclass(frozen=True, slots=True)
class DocGroup:
    doc: "Doc"


@dataclass(frozen=True, slots=True)
class DocColor:
    """Zero-width escape sequence"""
    escape: str


Doc: TypeAlias = str | DocCons | DocNest | DocBreak | DocGroup | DocColor


@unique
class BreakMode(StrEnum):
    """
    How container_doc() separates items.

    FLEX fills lines greedily, STRICT puts one item per line once the container does not
    fit, MAYBE picks FLEX when all items are plain strings and STRICT otherwise.
    """
    FLEX = "flex"
    MAYBE = "maybe"
    STRICT = "strict"


# Methods --------------------------------------------------------------------------------------------------------------


def concat(*docs: Doc) -> Doc:
    """
    Concatenate documents left to right.

    Examples:
        >>> format_doc(concat("a", "b", "c"), 80)
        'abc'
    """
    result: Doc = ""
    for doc in docs:
        if doc == "":
            continue
        result = doc if result == "" else DocCons(result, doc)
    return result


def nest(doc: Doc, indent: int) -> Doc:
    """Indent every newline produced inside doc by indent columns."""
    if indent == 0:
        return doc
    return DocNest(doc, indent)


def group(doc: Doc) -> Doc:
    """Lay doc out flat when it fits in the remaining width, broken otherwise."""
    return DocGroup(doc)


def glue(left: Doc, text: str, right: Doc) -> Doc:
    """Join left and right with a strict break rendered as text when flat."""
    return concat(left, DocBreak(text, flex=False), right)


def flex_glue(left: Doc, text: str, right: Doc) -> Doc:
    """Join left and right with a flex break rendered as text when flat."""
    return concat(left, DocBreak(text, flex=True), right)


def color(doc: Doc, escape: str, reset: str) -> Doc:
    """Wrap doc in zero-width colour escapes."""
    return concat(DocColor(escape), doc, DocColor(reset))


def fold(docs: Iterable[Doc], folder: Callable[[Doc, Doc], Doc]) -> Doc:
    """
    Fold documents from the right.

    Examples:
        >>> format_doc(fold(["a", "b", "c"], lambda d, acc: glue(d, " ", acc)), 80)
        'a b c'
    """
    docs = list(docs)
    if not docs:
        return ""
    acc = docs[-1]
    for doc in reversed(docs[:-1]):
        acc = folder(doc, acc)
    return acc


def is_simple(doc: Doc) -> bool:
    """Check whether doc is a plain string, possibly coloured."""
    if isinstance(doc, str):
        return True
    if isinstance(doc, DocColor):
        return True
    if isinstance(doc, DocCons):
        return is_simple(doc.left) and is_simple(doc.right)
    return False


def decrement(limit: int | float) -> int | float:
    """Decrease a limit by one without going below zero, unbounded limits stay unbounded."""
    if limit == math.inf:
        return limit
    return max(0, limit - 1)


def container_doc(left: Doc, items: list, right: Doc, options: Any,
                  fun: Callable[[Any, Any], "Doc | tuple[Doc, Any]"], *,
                  separator: Doc = ",", break_mode: BreakMode | str = BreakMode.MAYBE) -> tuple[Doc, Any]:
    """
    Render a sequence of items between left and right delimiters.

    Items are rendered with fun in order, each against the options returned by the previous
    sibling so all of them share one shrinking `limit`. A fun returning a bare document costs
    one unit, a fun returning `(doc, options)` reports its own consumption. Once the limit
    reaches zero the remaining items collapse into a single "...".

    Args:
        left: Opening delimiter.
        items: Items to render.
        right: Closing delimiter.
        options: Any frozen dataclass with a `limit` field.
        fun: Item renderer, `fun(item, options) -> doc | (doc, options)`.
        separator: Appended to every item but the last.
        break_mode: A BreakMode value.

    Returns:
        Tuple of the container document and the options after rendering every item.
    """
    break_mode = BreakMode(break_mode)
    if not items:
        return concat(left, right), options

    docs = []
    simple = True
    for item in items:
        if options.limit <= 0:
            docs.append("...")
            break
        doc, options = _call_container_fun(fun, item, options)
        docs.append(doc)
        simple = simple and is_simple(doc)

    flex = break_mode is BreakMode.FLEX or (break_mode is BreakMode.MAYBE and simple)
    joiner = flex_glue if flex else glue
    joined = [concat(doc, separator) for doc in docs[:-1]] + [docs[-1]]
    inner = fold(joined, lambda doc, acc: joiner(doc, " ", acc))

    if flex:
        return group(concat(left, nest(inner, 1), right)), options
    return group(glue(nest(glue(left, "", inner), 2), "", right)), options


def format_doc(doc: Doc, width: int | float) -> str:
    """
    Lay doc out to text no wider than width where breaks allow.

    An unbounded width (math.inf) keeps every group flat.

    Examples:
        >>> doc = group(glue("hello", " ", "world"))
        >>> format_doc(doc, 80)
        'hello world'
        >>> format_doc(doc, 5)
        'hello\\nworld'
    """
    out = []
    column = 0
    # Entries are (indent, flat, doc), processed last-in first-out
    stack: list[tuple[int, bool, Doc]] = [(0, width == math.inf, doc)]
    while stack:
        indent, flat, d = stack.pop()
        if isinstance(d, str):
            out.append(d)
            column += len(d)
        elif isinstance(d, DocCons):
            stack.append((indent, flat, d.right))
            stack.append((indent, flat, d.left))
        elif isinstance(d, DocNest):
            stack.append((indent + d.indent, flat, d.doc))
        elif isinstance(d, DocColor):
            out.append(d.escape)
        elif isinstance(d, DocGroup):
            fits_flat = flat or _fits(width - column, stack + [(indent, True, d.doc)])
            stack.append((indent, fits_flat, d.doc))
        elif isinstance(d, DocBreak):
            if flat or (d.flex and _fits(width - column - len(d.text), list(stack))):
                out.append(d.text)
                column += len(d.text)
            else:
                out.append("\n" + " " * indent)
                column = indent
        else:
            raise TypeError(f"unsupported document of type {type(d).__name__}")
    return "".join(out)


# Private Methods ------------------------------------------------------------------------------------------------------

def _call_container_fun(fun: Callable, item: Any, options: Any) -> tuple[Doc, Any]:
    result = fun(item, options)
    if isinstance(result, tuple):
        doc, options = result
        return doc, options
    return result, replace(options, limit=decrement(options.limit))


def _fits(remaining: int | float, stack: list[tuple[int, bool, Doc]]) -> bool:
    """
    Check whether the entries fit in the remaining width up to the next newline.

    Broken-mode breaks end the measured line, so they always fit.
    """
    if remaining == math.inf:
        return True
    while stack:
        if remaining < 0:
            return False
        indent, flat, d = stack.pop()
        if isinstance(d, str):
            remaining -= len(d)
        elif isinstance(d, DocCons):
            stack.append((indent, flat, d.right))
            stack.append((indent, flat, d.left))
        elif isinstance(d, DocNest):
            stack.append((indent + d.indent, flat, d.doc))
        elif isinstance(d, DocGroup):
            stack.append((indent, True, d.doc))
        elif isinstance(d, DocBreak):
            if not flat:
                return True
            remaining -= len(d.text)
    return remaining >= 0

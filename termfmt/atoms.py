"""
Interned symbolic constants.

An Atom is a named constant compared by identity, rendered as `:name`. Atoms whose name starts
with `Alias.` stand for module-style names and render bare, e.g. `Atom("Alias.Foo.Bar")`
renders as `Foo.Bar`.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import re
from enum import StrEnum, unique
from typing import Final, Self

# Local ----------------------------------------------------------------------------------------------------------------

from .escape import escape
from .utils import fmt_type

# Constants ------------------------------------------------------------------------------------------------------------

ALIAS_PREFIX: Final[str] = "Alias."

_IDENTIFIER = re.compile(r"[^\W\d][\w@]*[?!]?")
_KEY_IDENTIFIER = re.compile(r"[^\W\d]\w*[?!]?")
_ALIAS_SEGMENT = re.compile(r"[A-Z]\w*")
_OPERATORS = frozenset({
    "+", "-", "*", "/", "++", "--", "**", "+++", "---",
    "==", "!=", "===", "!==", "=~", "<", ">", "<=", ">=",
    "&&", "&&&", "||", "|||", "!", "^", "^^^", "~~~", "<>",
    "|>", "<<<", ">>>", "<<~", "~>>", "<~", "~>", "<~>", "<|>",
    "..", "...", "..//", "\\\\", "<-", "->", "::", "=", "|", "&", "@",
})


# Classes --------------------------------------------------------------------------------------------------------------

class Atom:
    """
    Interned named constant.

    Constructing an Atom with the same name twice returns the same object, so atoms can be
    compared with `is`. Atoms order by name.

    Examples:
        >>> Atom("ok") is Atom("ok")
        True
        >>> Atom("ok")
        Atom('ok')
        >>> Atom("Alias.Foo").is_alias
        True
    """
    __slots__ = ("_name",)
    _table: dict[str, "Atom"] = {}

    def __new__(cls, name: str) -> Self:
        if not isinstance(name, str):
            raise TypeError(f"atom name must be str, but found {fmt_type(name)}")
        atom = cls._table.get(name)
        if atom is None:
            atom = super().__new__(cls)
            object.__setattr__(atom, "_name", name)
            atom = cls._table.setdefault(name, atom)
        return atom

    def __setattr__(self, key, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_alias(self) -> bool:
        return self._name.startswith(ALIAS_PREFIX)

    def __repr__(self) -> str:
        return f"Atom({self._name!r})"

    def __str__(self) -> str:
        return self._name

    def __hash__(self) -> int:
        return hash((Atom, self._name))

    def __lt__(self, other) -> bool:
        if not isinstance(other, Atom):
            return NotImplemented
        return self._name < other._name

    def __reduce__(self):
        return (Atom, (self._name,))


@unique
class AtomKind(StrEnum):
    """Position an atom is rendered in: a standalone literal or a keyword key."""
    KEY = "key"
    LITERAL = "literal"


# Methods --------------------------------------------------------------------------------------------------------------

def inspect_atom(atom: Atom, kind: AtomKind | str = AtomKind.LITERAL) -> str:
    """
    Render an atom as a literal (`:ok`, `:"a b"`, `Foo.Bar`) or a keyword key (`ok:`, `"a b":`).

    Examples:
        >>> inspect_atom(Atom("ok"))
        ':ok'
        >>> inspect_atom(Atom("with space"))
        ':"with space"'
        >>> inspect_atom(Atom("Alias.Foo.Bar"))
        'Foo.Bar'
        >>> inspect_atom(Atom("ok"), "key")
        'ok:'
    """
    kind = AtomKind(kind)
    name = atom.name

    if kind is AtomKind.KEY:
        if _KEY_IDENTIFIER.fullmatch(name):
            return name + ":"
        return _quote(name) + ":"

    if atom.is_alias:
        alias = name[len(ALIAS_PREFIX):]
        if alias and all(_ALIAS_SEGMENT.fullmatch(s) for s in alias.split(".")):
            return alias
        return ":" + _quote(name)

    if _IDENTIFIER.fullmatch(name) or name in _OPERATORS:
        return ":" + name
    return ":" + _quote(name)


# Private Methods ------------------------------------------------------------------------------------------------------

def _quote(name: str) -> str:
    escaped, _ = escape(name, '"')
    return f'"{escaped}"'

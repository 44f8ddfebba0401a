"""
Sentinel objects shared by the formatter and the renderer.

Sentinels:
    UNSET: An option that the caller did not provide (distinguishes from None)
    MISSING: A temporal field that the source value does not carry

Helper Functions:
    ifnotunset: Return default if value is UNSET, otherwise return value
    ifnotmissing: Return default if value is MISSING, otherwise return value

Example:
    >>> def merge(limit: int | UnsetType = UNSET) -> int:
    ...     return ifnotunset(limit, default=50)

    >>> merge()
    50
"""

from typing import Any, Final

__all__ = [
    'UNSET',
    'MISSING',
    'UnsetType',
    'MissingType',
    'ifnotunset',
    'ifnotmissing',
]


# Base Sentinel --------------------------------------------------------------------------------------------------------

class _SentinelBase:
    """
    Base class for all sentinel objects.

    Sentinels are falsy singletons compared by identity.
    """
    __slots__ = ('_name',)

    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        return f'<{self._name}>'

    def __eq__(self, other: Any) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> tuple:
        return (self.__class__, ())


# Sentinel Types -------------------------------------------------------------------------------------------------------

class MissingType(_SentinelBase):
    """
    Sentinel type for MISSING.

    Marks a field of a temporal record that the source value does not carry,
    e.g. the hour of a plain date. Directives that need such a field fail.
    """
    _instance: 'MissingType | None' = None

    def __new__(cls) -> 'MissingType':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if not hasattr(self, '_name'):
            super().__init__("MISSING")


class UnsetType(_SentinelBase):
    """
    Sentinel type for UNSET.

    Default of every `merge()` override: the current value is kept.
    """
    _instance: 'UnsetType | None' = None

    def __new__(cls) -> 'UnsetType':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if not hasattr(self, '_name'):
            super().__init__("UNSET")


# Sentinel Objects -----------------------------------------------------------------------------------------------------

MISSING: Final[MissingType] = MissingType()
"""
Sentinel representing a field absent from a temporal value.
"""

UNSET: Final[UnsetType] = UnsetType()
"""
Sentinel representing an unprovided optional argument.

Use with identity check: `if arg is UNSET:`
"""


# Helper Functions -----------------------------------------------------------------------------------------------------

def _if_sentinel(value: Any, sentinel: Any, *, default: Any = None) -> Any:
    """Return default when value is the sentinel, otherwise value."""
    if value is not sentinel:
        return value
    return default


def ifnotunset(value: Any, *, default: Any = None) -> Any:
    """
    Return value unless it is UNSET, in which case return default.

    Examples:
        >>> ifnotunset(UNSET, default=80)
        80
        >>> ifnotunset(None, default=80) is None
        True
    """
    return _if_sentinel(value, UNSET, default=default)


def ifnotmissing(value: Any, *, default: Any = None) -> Any:
    """
    Return value unless it is MISSING, in which case return default.

    Examples:
        >>> ifnotmissing(MISSING, default="")
        ''
    """
    return _if_sentinel(value, MISSING, default=default)

"""
Template-driven date and time formatting.

Interprets the `%Y`, `%H`, `%z`, ... mini-language against a temporal value in a single
left-to-right pass. Naming of months, weekdays and am/pm markers, as well as the preferred
sub-templates behind `%c`, `%x` and `%X`, are configurable through FormatOptions.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import collections.abc as abc
import datetime as dt
import inspect
from dataclasses import dataclass, fields, replace
from enum import Flag, auto
from typing import Any, Callable, Mapping, Self, Sequence

# Local ----------------------------------------------------------------------------------------------------------------

from .sentinels import MISSING, UNSET, MissingType, UnsetType, ifnotmissing, ifnotunset
from .utils import fmt_type, fmt_value

# Constants ------------------------------------------------------------------------------------------------------------

MONTH_NAMES = ("January", "February", "March", "April", "May", "June",
               "July", "August", "September", "October", "November", "December")
ABBREVIATED_MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
                           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
DAY_OF_WEEK_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
ABBREVIATED_DAY_OF_WEEK_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
AM_PM_NAMES = ("am", "pm")

_SPACE_PADDED = frozenset("aAbBpPZ")
_WIDTH_2 = frozenset("dHImMSy")
_WIDTH_4 = frozenset("Yz")

# Classes --------------------------------------------------------------------------------------------------------------


class Preferred(Flag):
    """Preferred templates currently being expanded; guards against self-referencing aliases."""
    NONE = 0
    DATE = auto()
    TIME = auto()
    DATETIME = auto()


@dataclass(frozen=True)
class Namer:
    """
    Naming function of arity 1 (term) or 2 (term, value being formatted).

    Shape is resolved once, so directives never re-inspect the callable.
    """
    func: Callable[..., str]
    arity: int = 1

    @classmethod
    def from_callable(cls, func: Callable[..., str], *, option: str = "naming function") -> Self:
        """
        Build a Namer from a callable, detecting whether it takes 1 or 2 positional arguments.

        Raises:
            TypeError: If func is not callable or accepts neither 1 nor 2 arguments.
        """
        if not callable(func):
            raise TypeError(f"{option} must be callable, but found {fmt_type(func)}")
        try:
            sig = inspect.signature(func)
        except (TypeError, ValueError):
            # Builtins without a signature are assumed unary
            return cls(func, 1)
        for arity in (1, 2):
            try:
                sig.bind(*range(arity))
            except TypeError:
                continue
            return cls(func, arity)
        raise TypeError(f"{option} must accept 1 or 2 arguments, but found signature {sig}")

    @classmethod
    def from_table(cls, table: Sequence[str], size: int, *, option: str = "name table",
                   keys: Sequence[Any] | None = None) -> Self:
        """
        Build a Namer looking names up in a fixed table.

        Numeric keys are 1-based (month 1 is the first entry); explicit keys map in order.

        Raises:
            TypeError: If table entries are not strings.
            ValueError: If table does not hold exactly `size` entries.
        """
        names = tuple(table)
        if len(names) != size:
            raise ValueError(f"{option} expects {size} names, but found {len(names)}")
        for name in names:
            if not isinstance(name, str):
                raise TypeError(f"{option} entries must be str, but found {fmt_type(name)}")

        if keys is not None:
            index = dict(zip(keys, names))
            return cls(index.__getitem__, 1)
        return cls(lambda n: names[n - 1], 1)

    def __call__(self, term: Any, value: Any) -> str:
        if self.arity == 1:
            return self.func(term)
        return self.func(term, value)


@dataclass(frozen=True)
class FormatOptions:
    """
    Configuration for strftime().

    Attributes:
        preferred_date: Template expanded by `%x`.
        preferred_time: Template expanded by `%X`.
        preferred_datetime: Template expanded by `%c`.
        am_pm_names: Receives "am" or "pm".
        month_names: Receives the month number 1-12.
        abbreviated_month_names: Receives the month number 1-12.
        day_of_week_names: Receives the ISO weekday 1-7 (Monday is 1).
        abbreviated_day_of_week_names: Receives the ISO weekday 1-7.

    Naming options accept a callable of arity 1 (term) or 2 (term, value being formatted), or a
    sequence of names: 2 for am/pm, 12 for months, 7 for weekdays. All options are validated
    at construction and stored normalized to Namer.

    Examples:
        >>> opts = FormatOptions(month_names=lambda m: f"M{m}")
        >>> opts.month_names(3, None)
        'M3'
    """
    preferred_date: str = "%Y-%m-%d"
    preferred_time: str = "%H:%M:%S"
    preferred_datetime: str = "%Y-%m-%d %H:%M:%S"
    am_pm_names: Namer | Callable | Sequence[str] = AM_PM_NAMES
    month_names: Namer | Callable | Sequence[str] = MONTH_NAMES
    abbreviated_month_names: Namer | Callable | Sequence[str] = ABBREVIATED_MONTH_NAMES
    day_of_week_names: Namer | Callable | Sequence[str] = DAY_OF_WEEK_NAMES
    abbreviated_day_of_week_names: Namer | Callable | Sequence[str] = ABBREVIATED_DAY_OF_WEEK_NAMES

    def __post_init__(self):
        """Validate templates and normalize naming options to Namer"""
        for name in ("preferred_date", "preferred_time", "preferred_datetime"):
            template = getattr(self, name)
            if not isinstance(template, str):
                raise TypeError(f"{name} must be str, but found {fmt_type(template)}")

        table_sizes = {
            "am_pm_names": 2,
            "month_names": 12,
            "abbreviated_month_names": 12,
            "day_of_week_names": 7,
            "abbreviated_day_of_week_names": 7,
        }
        for name, size in table_sizes.items():
            object.__setattr__(self, name, _to_namer(name, getattr(self, name), size))

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> Self:
        """Build options from a mapping, rejecting unknown keys."""
        return cls().merge(**options)

    def merge(self,
              *,
              preferred_date: str | UnsetType = UNSET,
              preferred_time: str | UnsetType = UNSET,
              preferred_datetime: str | UnsetType = UNSET,
              am_pm_names: Namer | Callable | Sequence[str] | UnsetType = UNSET,
              month_names: Namer | Callable | Sequence[str] | UnsetType = UNSET,
              abbreviated_month_names: Namer | Callable | Sequence[str] | UnsetType = UNSET,
              day_of_week_names: Namer | Callable | Sequence[str] | UnsetType = UNSET,
              abbreviated_day_of_week_names: Namer | Callable | Sequence[str] | UnsetType = UNSET,
              **unknown,
              ) -> "FormatOptions":
        """
        Create a new FormatOptions instance with merged configuration options.

        Parameters not provided (UNSET) are inherited from the current instance.

        Raises:
            ValueError: If an option name is unknown.
        """
        if unknown:
            raise ValueError(f"unknown option {next(iter(unknown))!r} given to strftime")
        return FormatOptions(
            preferred_date=ifnotunset(preferred_date, default=self.preferred_date),
            preferred_time=ifnotunset(preferred_time, default=self.preferred_time),
            preferred_datetime=ifnotunset(preferred_datetime, default=self.preferred_datetime),
            am_pm_names=ifnotunset(am_pm_names, default=self.am_pm_names),
            month_names=ifnotunset(month_names, default=self.month_names),
            abbreviated_month_names=ifnotunset(abbreviated_month_names, default=self.abbreviated_month_names),
            day_of_week_names=ifnotunset(day_of_week_names, default=self.day_of_week_names),
            abbreviated_day_of_week_names=ifnotunset(abbreviated_day_of_week_names,
                                                     default=self.abbreviated_day_of_week_names),
        )



@dataclass(frozen=True)
class TemporalRecord:
    """
    Fields read by strftime directives.

    Every field defaults to MISSING; a directive that needs a missing field fails.
    `microsecond` is a (value, precision) pair, offsets are in seconds.
    """
    year: int | MissingType = MISSING
    month: int | MissingType = MISSING
    day: int | MissingType = MISSING
    hour: int | MissingType = MISSING
    minute: int | MissingType = MISSING
    second: int | MissingType = MISSING
    microsecond: tuple[int, int] | MissingType = MISSING
    utc_offset: int | MissingType = MISSING
    std_offset: int | MissingType = MISSING
    zone_abbr: str | MissingType = MISSING

    def __post_init__(self):
        us = self.microsecond
        if us is MISSING:
            return
        if isinstance(us, int) and not isinstance(us, bool):
            object.__setattr__(self, "microsecond", (us, 6))
        elif isinstance(us, abc.Sequence) and not isinstance(us, (str, bytes)) and len(us) == 2:
            object.__setattr__(self, "microsecond", (int(us[0]), int(us[1])))
        else:
            raise TypeError(f"microsecond must be int or (value, precision) pair, but found {fmt_value(us)}")


@dataclass(frozen=True)
class _Context:
    record: TemporalRecord
    value: Any
    options: FormatOptions
    guard: Preferred = Preferred.NONE


# Methods --------------------------------------------------------------------------------------------------------------


def strftime(value: Any, template: str, options: FormatOptions | Mapping[str, Any] | None = None,
             **overrides) -> str:
    """
    Format a date, time or datetime-like value according to a template.

    Directives are `%` followed by optional modifiers and a letter. Modifiers are `-` (no
    padding), `0` (zero padding), `_` (space padding) and a decimal width.

    Args:
        value: datetime, date, time, TemporalRecord, mapping or object with the record fields.
        template: The format template.
        options: FormatOptions or mapping of option overrides.
        **overrides: Option overrides applied last.

    Returns:
        The formatted string.

    Raises:
        TypeError: If template is not str or a naming option has the wrong shape.
        ValueError: On unknown options, invalid directives, self-referencing preferred
            templates or fields missing from value.

    Examples:
        >>> strftime(dt.datetime(2019, 8, 26, 13, 52, 6), "%y-%m-%d %I:%M:%S %p")
        '19-08-26 01:52:06 PM'
        >>> strftime(dt.date(2019, 8, 26), "%A %-d %B", month_names=lambda m: "Aug.")
        'Monday 26 Aug.'
    """
    if not isinstance(template, str):
        raise TypeError(f"strftime template must be str, but found {fmt_type(template)}")

    if options is None:
        opts = FormatOptions()
    elif isinstance(options, FormatOptions):
        opts = options
    elif isinstance(options, abc.Mapping):
        opts = FormatOptions.from_mapping(options)
    else:
        raise TypeError(f"options must be FormatOptions or mapping, but found {fmt_type(options)}")
    if overrides:
        opts = opts.merge(**overrides)

    ctx = _Context(record=as_temporal(value), value=value, options=opts)
    return "".join(_parse(template, ctx))


def as_temporal(value: Any) -> TemporalRecord:
    """
    Normalize a value to TemporalRecord.

    Aware datetimes and times map `utcoffset() - dst()` to utc_offset, `dst()` to std_offset
    and `tzname()` to zone_abbr. Mappings and arbitrary objects contribute whichever record
    fields they expose.
    """
    if isinstance(value, TemporalRecord):
        return value

    if isinstance(value, (dt.datetime, dt.date, dt.time)):
        kwargs = {}
        if isinstance(value, dt.date):
            kwargs.update(year=value.year, month=value.month, day=value.day)
        if isinstance(value, (dt.datetime, dt.time)):
            kwargs.update(hour=value.hour, minute=value.minute, second=value.second,
                          microsecond=(value.microsecond, 6))
            kwargs.update(_tz_fields(value))
        return TemporalRecord(**kwargs)

    names = [f.name for f in fields(TemporalRecord)]
    if isinstance(value, abc.Mapping):
        kwargs = {name: value[name] for name in names if name in value}
    else:
        kwargs = {name: getattr(value, name) for name in names if hasattr(value, name)}
    return TemporalRecord(**kwargs)


def pad_leading(fragment: str, width: int, pad: str) -> str:
    """
    Prepend pad until fragment is width characters long.

    Never truncates; an empty pad leaves the fragment unchanged.

    Examples:
        >>> pad_leading("7", 3, "0")
        '007'
        >>> pad_leading("2024", 2, "0")
        '2024'
    """
    to_pad = width - len(fragment)
    if to_pad > 0:
        return pad * to_pad + fragment
    return fragment


def day_of_week(year: int, month: int, day: int) -> int:
    """ISO weekday of a proleptic Gregorian date, Monday is 1."""
    return (_days_from_civil(year, month, day) + 3) % 7 + 1


def day_of_year(year: int, month: int, day: int) -> int:
    """Ordinal day within the year, January 1st is 1."""
    return _days_from_civil(year, month, day) - _days_from_civil(year, 1, 1) + 1


def quarter_of_year(month: int) -> int:
    return (month - 1) // 3 + 1


# Private Methods ------------------------------------------------------------------------------------------------------

def _to_namer(option: str, value: Any, size: int) -> Namer:
    if isinstance(value, Namer):
        return value
    if isinstance(value, abc.Sequence) and not isinstance(value, (str, bytes)):
        keys = AM_PM_NAMES if option == "am_pm_names" else None
        return Namer.from_table(value, size, option=option, keys=keys)
    return Namer.from_callable(value, option=option)


def _tz_fields(value: dt.datetime | dt.time) -> dict:
    offset = value.utcoffset()
    if offset is None:
        return {}
    dst = value.dst() or dt.timedelta(0)
    result = {
        "utc_offset": int((offset - dst).total_seconds()),
        "std_offset": int(dst.total_seconds()),
    }
    abbr = value.tzname()
    if abbr is not None:
        result["zone_abbr"] = abbr
    return result


def _days_from_civil(year: int, month: int, day: int) -> int:
    """Days since 1970-01-01 in the proleptic Gregorian calendar, valid for negative years."""
    y = year - 1 if month <= 2 else year
    era = y // 400
    yoe = y - era * 400
    mp = (month + 9) % 12
    doy = (153 * mp + 2) // 5 + day - 1
    doe = yoe * 365 + yoe // 4 - yoe // 100 + doy
    return era * 146097 + doe - 719468


def _default_pad(directive: str) -> str:
    return " " if directive in _SPACE_PADDED else "0"


def _default_width(directive: str) -> int:
    if directive in _WIDTH_2:
        return 2
    if directive == "j":
        return 3
    if directive in _WIDTH_4:
        return 4
    return 0


def _parse(template: str, ctx: _Context) -> list[str]:
    """Expand template into a list of fragments, one per literal character or directive."""
    acc = []
    i, n = 0, len(template)
    while i < n:
        char = template[i]
        i += 1
        if char != "%":
            acc.append(char)
            continue

        width = pad = None
        while i < n:
            c = template[i]
            if c == "-" and pad is None:
                pad = ""
            elif c == "0" and width is None and pad is None:
                pad = "0"
            elif c == "_" and pad is None:
                pad = " "
            elif "0" <= c <= "9":
                width = (width or 0) * 10 + int(c)
            else:
                break
            i += 1

        directive = template[i] if i < n else ""
        handler = _DIRECTIVES.get(directive)
        if handler is None:
            raise ValueError(f"invalid strftime format: %{directive}")
        if pad is None:
            pad = _default_pad(directive)
        if width is None:
            width = _default_width(directive)
        acc.append(handler(ctx, width, pad))
        i += 1
    return acc


def _field(ctx: _Context, name: str, directive: str) -> Any:
    value = getattr(ctx.record, name)
    if value is MISSING:
        raise ValueError(f"strftime directive %{directive} requires field '{name}' "
                         f"which is missing from {fmt_type(ctx.value)}")
    return value


def _date(ctx: _Context, directive: str) -> tuple[int, int, int]:
    return (_field(ctx, "year", directive),
            _field(ctx, "month", directive),
            _field(ctx, "day", directive))


def _number(name: str, directive: str) -> Callable[[_Context, int, str], str]:
    def handler(ctx: _Context, width: int, pad: str) -> str:
        return pad_leading(str(_field(ctx, name, directive)), width, pad)

    return handler


def _named(option: str, directive: str) -> Callable[[_Context, int, str], str]:
    def handler(ctx: _Context, width: int, pad: str) -> str:
        if option.endswith("month_names"):
            term = _field(ctx, "month", directive)
        else:
            term = day_of_week(*_date(ctx, directive))
        namer = getattr(ctx.options, option)
        return pad_leading(namer(term, ctx.value), width, pad)

    return handler


def _preferred(option: str, flag: Preferred) -> Callable[[_Context, int, str], str]:
    def handler(ctx: _Context, width: int, pad: str) -> str:
        if flag in ctx.guard:
            raise ValueError(f"tried to format {option} within another {option} format")
        nested = replace(ctx, guard=ctx.guard | flag)
        result = _parse(getattr(ctx.options, option), nested)
        if len(result) < width:
            result = [pad] * (width - len(result)) + result
        return "".join(result)

    return handler


def _am_pm(upper: bool) -> Callable[[_Context, int, str], str]:
    def handler(ctx: _Context, width: int, pad: str) -> str:
        hour = _field(ctx, "hour", "p" if upper else "P")
        name = ctx.options.am_pm_names("pm" if hour > 11 else "am", ctx.value)
        name = name.upper() if upper else name.lower()
        return pad_leading(name, width, pad)

    return handler


def _percent(ctx: _Context, width: int, pad: str) -> str:
    return pad_leading("%", width, pad)


def _microsecond(ctx: _Context, width: int, pad: str) -> str:
    us, precision = _field(ctx, "microsecond", "f")
    return str(us).rjust(6, "0")[:max(precision, 1)]


def _hour_12(ctx: _Context, width: int, pad: str) -> str:
    hour = _field(ctx, "hour", "I")
    return pad_leading(str((hour + 23) % 12 + 1), width, pad)


def _day_of_year(ctx: _Context, width: int, pad: str) -> str:
    return pad_leading(str(day_of_year(*_date(ctx, "j"))), width, pad)


def _quarter(ctx: _Context, width: int, pad: str) -> str:
    return pad_leading(str(quarter_of_year(_field(ctx, "month", "q"))), width, pad)


def _weekday(ctx: _Context, width: int, pad: str) -> str:
    return pad_leading(str(day_of_week(*_date(ctx, "u"))), width, pad)


def _epoch(ctx: _Context, width: int, pad: str) -> str:
    days = _days_from_civil(*_date(ctx, "s"))
    seconds = (days * 86400
               + _field(ctx, "hour", "s") * 3600
               + _field(ctx, "minute", "s") * 60
               + _field(ctx, "second", "s"))
    record = ctx.record
    if record.utc_offset is not MISSING and record.std_offset is not MISSING:
        seconds -= record.utc_offset + record.std_offset
    # Fractions truncate toward zero
    micros = seconds * 1_000_000 + ifnotmissing(record.microsecond, default=(0, 0))[0]
    whole = abs(micros) // 1_000_000
    return str(-whole if micros < 0 else whole)


def _year_2(ctx: _Context, width: int, pad: str) -> str:
    year = _field(ctx, "year", "y")
    # Remainder truncated toward zero
    rem = year % 100 if year >= 0 else -(-year % 100)
    return pad_leading(str(rem), width, pad)


def _year(ctx: _Context, width: int, pad: str) -> str:
    year = _field(ctx, "year", "Y")
    sign = "-" if year < 0 else ""
    return sign + pad_leading(str(abs(year)), width, pad)


def _offset(ctx: _Context, width: int, pad: str) -> str:
    record = ctx.record
    if record.utc_offset is MISSING or record.std_offset is MISSING:
        return ""
    total = record.utc_offset + record.std_offset
    absolute = abs(total)
    number = absolute // 3600 * 100 + (absolute // 60) % 60
    sign = "+" if total >= 0 else "-"
    return sign + pad_leading(str(number), width, pad)


def _zone(ctx: _Context, width: int, pad: str) -> str:
    return pad_leading(ifnotmissing(ctx.record.zone_abbr, default=""), width, pad)


_DIRECTIVES: dict[str, Callable[[_Context, int, str], str]] = {
    "%": _percent,
    "a": _named("abbreviated_day_of_week_names", "a"),
    "A": _named("day_of_week_names", "A"),
    "b": _named("abbreviated_month_names", "b"),
    "B": _named("month_names", "B"),
    "c": _preferred("preferred_datetime", Preferred.DATETIME),
    "d": _number("day", "d"),
    "f": _microsecond,
    "H": _number("hour", "H"),
    "I": _hour_12,
    "j": _day_of_year,
    "m": _number("month", "m"),
    "M": _number("minute", "M"),
    "p": _am_pm(upper=True),
    "P": _am_pm(upper=False),
    "q": _quarter,
    "s": _epoch,
    "S": _number("second", "S"),
    "u": _weekday,
    "x": _preferred("preferred_date", Preferred.DATE),
    "X": _preferred("preferred_time", Preferred.TIME),
    "y": _year_2,
    "Y": _year,
    "z": _offset,
    "Z": _zone,
}

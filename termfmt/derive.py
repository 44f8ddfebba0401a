"""
Declarative render rules for dataclasses.

derive() computes, once per dataclass, which fields are rendered and which of them may be
skipped when they hold their default, then registers a render rule for the class:

    @derive(only=["id", "name"])
    @dataclass
    class User:
        id: int
        name: str
        password: str

    render(User(1, "ann", "secret"))  # '#User<id: 1, name: "ann", ...>'
"""

# Standard library -----------------------------------------------------------------------------------------------------
import dataclasses
from dataclasses import dataclass
from typing import Any, Callable, Literal, Sequence

# Local ----------------------------------------------------------------------------------------------------------------

from .algebra import Doc
from .render import RenderOptions, record_doc, register_rule
from .sentinels import MISSING
from .utils import class_name, fmt_type


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class StructFieldSpec:
    """
    A rendered field and the default it is compared against.

    A field is skipped at render time when its value equals `default`; non-optional fields
    carry MISSING and are always shown.
    """
    name: str
    default: Any = MISSING

    def is_skipped(self, value: Any) -> bool:
        if self.default is MISSING:
            return False
        return getattr(value, self.name) == self.default


@dataclass(frozen=True)
class DerivedRule:
    """
    Render rule produced by derive().

    Attributes:
        fields: Rendered fields in definition order.
        reconstructible: Render as `%Name{...}` when True, `#Name<..., ...>` otherwise.
    """
    fields: tuple[StructFieldSpec, ...]
    reconstructible: bool

    def __call__(self, value: Any, options: RenderOptions) -> tuple[Doc, RenderOptions]:
        names = [spec.name for spec in self.fields if not spec.is_skipped(value)]
        name = class_name(value, fully_qualified=options.fully_qualified_names)
        return record_doc(value, name, names, options, opaque=not self.reconstructible)


# Methods --------------------------------------------------------------------------------------------------------------

def derive(cls: type | None = None, /, *,
           only: Sequence[str] | None = None,
           except_: Sequence[str] | None = None,
           optional: Sequence[str] | Literal["all"] | None = None,
           ) -> type | Callable[[type], type]:
    """
    Register a render rule for a dataclass restricting which fields are shown.

    Usable as `@derive`, `@derive(...)` or `derive(cls, ...)`.

    Args:
        cls: The dataclass.
        only: Fields to render; all fields by default.
        except_: Fields never rendered.
        optional: Fields omitted while they equal their declared default, or "all".

    Returns:
        The dataclass itself, or a decorator when cls is omitted.

    Raises:
        TypeError: If cls is not a dataclass or an option is not a list of names.
        ValueError: If an option names a field the dataclass does not have.

    Notes:
        Records keep the reconstructible `%Name{...}` notation only while every field is
        rendered and nothing is excluded; otherwise they render as `#Name<..., ...>`.
        Fields skipped through `optional` do not affect the notation.
    """
    if cls is None:
        return lambda c: derive(c, only=only, except_=except_, optional=optional)

    if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
        raise TypeError(f"derive expects a dataclass type, but found {fmt_type(cls)}")

    all_fields = {f.name: f for f in dataclasses.fields(cls)}
    names = list(all_fields)

    only = names if only is None else _validate_option("only", only, names, cls)
    except_ = [] if except_ is None else _validate_option("except_", except_, names, cls)
    if optional == "all":
        optional = names
    elif optional is None:
        optional = []
    else:
        optional = _validate_option("optional", optional, names, cls)

    reconstructible = sorted(names) == sorted(only) and not except_
    specs = tuple(
        StructFieldSpec(name, _field_default(all_fields[name]) if name in optional else MISSING)
        for name in names
        if name in only and name not in except_
    )
    register_rule(cls, DerivedRule(fields=specs, reconstructible=reconstructible))
    return cls


# Private Methods ------------------------------------------------------------------------------------------------------

def _validate_option(option: str, value: Any, names: list[str], cls: type) -> list[str]:
    if not isinstance(value, (list, tuple)):
        raise TypeError(f"invalid value for {option!r} when deriving render rule for {cls.__qualname__}: "
                        f"expected a list of field names, but found {fmt_type(value)}")
    unknown = [name for name in value if name not in names]
    if unknown:
        raise ValueError(f"unknown fields {unknown} in {option!r} "
                         f"when deriving render rule for {cls.__qualname__}")
    return list(value)


def _field_default(f: dataclasses.Field) -> Any:
    if f.default is not dataclasses.MISSING:
        return f.default
    if f.default_factory is not dataclasses.MISSING:
        return f.default_factory()
    return MISSING

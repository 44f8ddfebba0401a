#
# Termfmt - Derive Tests
#

# Standard library -----------------------------------------------------------------------------------------------------
from dataclasses import dataclass, field

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from termfmt.derive import DerivedRule, StructFieldSpec, derive
from termfmt.render import get_rule, render
from termfmt.sentinels import MISSING


# Local Classes & Methods ----------------------------------------------------------------------------------------------

@dataclass
class User:
    id: int
    name: str
    password: str


@dataclass
class Vector:
    x: int
    y: int = 0
    z: int = 0


@dataclass
class Settings:
    debug: bool = False
    level: int = 1
    tags: list = field(default_factory=list)


class Plain:
    pass


# Tests ----------------------------------------------------------------------------------------------------------------

class TestDerive:
    def test_only(self, rules):
        derive(User, only=["id", "name"])
        rules.append(User)
        assert render(User(1, "ann", "secret")) == '#User<id: 1, name: "ann", ...>'

    def test_only_keeps_definition_order(self, rules):
        derive(User, only=["name", "id"])
        rules.append(User)
        assert render(User(1, "ann", "secret")) == '#User<id: 1, name: "ann", ...>'

    def test_only_all_fields_is_reconstructible(self, rules):
        derive(User, only=["password", "name", "id"])
        rules.append(User)
        assert render(User(1, "ann", "s")) == '%User{id: 1, name: "ann", password: "s"}'

    def test_except(self, rules):
        derive(User, except_=["password"])
        rules.append(User)
        assert render(User(1, "ann", "secret")) == '#User<id: 1, name: "ann", ...>'

    def test_no_options(self, rules):
        derive(User)
        rules.append(User)
        assert render(User(1, "ann", "s")) == '%User{id: 1, name: "ann", password: "s"}'

    def test_optional(self, rules):
        derive(Vector, optional=["z"])
        rules.append(Vector)
        assert render(Vector(1, 0, 0)) == "%Vector{x: 1, y: 0}"
        assert render(Vector(1, 0, 5)) == "%Vector{x: 1, y: 0, z: 5}"

    def test_optional_all(self, rules):
        derive(Settings, optional="all")
        rules.append(Settings)
        assert render(Settings()) == "%Settings{}"
        assert render(Settings(level=3)) == "%Settings{level: 3}"
        assert render(Settings(tags=["a"])) == '%Settings{tags: ["a"]}'

    def test_optional_without_default_always_shown(self, rules):
        derive(User, optional="all")
        rules.append(User)
        assert render(User(0, "", "")) == '%User{id: 0, name: "", password: ""}'

    def test_optional_with_except(self, rules):
        derive(Vector, except_=["x"], optional=["y"])
        rules.append(Vector)
        assert render(Vector(9, 0, 0)) == "#Vector<z: 0, ...>"

    def test_reconstructible_text_is_stable(self, rules):
        derive(Vector, optional=["z"])
        rules.append(Vector)
        text = render(Vector(x=1, y=2))
        assert text == "%Vector{x: 1, y: 2}"
        assert render(Vector(1, 2, 0)) == text

    def test_nested(self, rules):
        derive(User, only=["id"])
        rules.append(User)
        assert render([User(1, "a", "b"), User(2, "c", "d")]) == "[#User<id: 1, ...>, #User<id: 2, ...>]"
        assert render({"owner": User(1, "a", "b")}) == '%{"owner" => #User<id: 1, ...>}'

    def test_limit(self, rules):
        derive(User, only=["id", "name"])
        rules.append(User)
        assert render(User(1, "ann", "secret"), limit=1) == "#User<id: 1, ...>"

    def test_fully_qualified_names(self, rules):
        derive(User, only=["id"])
        rules.append(User)
        assert render(User(1, "a", "b"), fully_qualified_names=True) == f"#{__name__}.User<id: 1, ...>"

    def test_structs_disabled(self, rules):
        derive(User, only=["id"])
        rules.append(User)
        out = render(User(1, "ann", "secret"), structs=False)
        assert out == '%{__struct__: User, id: 1, name: "ann", password: "secret"}'

    def test_pretty(self, rules):
        derive(User, only=["id", "name"])
        rules.append(User)
        out = render(User(1, "ann", "secret"), pretty=True, width=10)
        assert out == '#User<\n  id: 1,\n  name: "ann",\n  ...\n>'


class TestDecoratorForms:
    def test_returns_class(self, rules):
        assert derive(User) is User
        rules.append(User)

    def test_called_with_options(self, rules):
        decorator = derive(only=["id"])
        assert callable(decorator)
        assert decorator(User) is User
        rules.append(User)
        assert render(User(1, "a", "b")) == "#User<id: 1, ...>"

    def test_decorator_syntax(self, rules):
        @derive(optional=["y"])
        @dataclass
        class Pair:
            x: int
            y: int = 0

        rules.append(Pair)
        assert render(Pair(1)) == "%TestDecoratorForms.test_decorator_syntax.<locals>.Pair{x: 1}"


class TestDerivedRule:
    def test_fields(self, rules):
        derive(Vector, only=["x", "z"], optional=["z"])
        rules.append(Vector)
        rule = get_rule(Vector)
        assert isinstance(rule, DerivedRule)
        assert rule.fields == (StructFieldSpec("x"), StructFieldSpec("z", 0))
        assert rule.reconstructible is False

    def test_default_factory_evaluated(self, rules):
        derive(Settings, optional=["tags"])
        rules.append(Settings)
        assert get_rule(Settings).fields[2] == StructFieldSpec("tags", [])

    def test_field_spec_skipping(self):
        assert StructFieldSpec("y", 0).is_skipped(Vector(1, 0)) is True
        assert StructFieldSpec("y", 0).is_skipped(Vector(1, 2)) is False
        assert StructFieldSpec("y").default is MISSING
        assert StructFieldSpec("y").is_skipped(Vector(1, 0)) is False


class TestValidation:
    @pytest.mark.parametrize(
        "kwargs, match",
        [
            pytest.param({"only": ["id", "nope"]}, r"unknown fields \['nope'\] in 'only'", id="only"),
            pytest.param({"except_": ["nope"]}, r"unknown fields \['nope'\] in 'except_'", id="except"),
            pytest.param({"optional": ["nope"]}, r"unknown fields \['nope'\] in 'optional'", id="optional"),
        ],
    )
    def test_unknown_fields(self, kwargs, match):
        with pytest.raises(ValueError, match=match + " when deriving render rule for User"):
            derive(User, **kwargs)
        assert get_rule(User) is None

    @pytest.mark.parametrize(
        "kwargs",
        [
            pytest.param({"only": "id"}, id="only-str"),
            pytest.param({"except_": {"password"}}, id="except-set"),
            pytest.param({"optional": "some"}, id="optional-str"),
        ],
    )
    def test_option_types(self, kwargs):
        with pytest.raises(TypeError, match="expected a list of field names"):
            derive(User, **kwargs)

    @pytest.mark.parametrize(
        "cls",
        [
            pytest.param(Plain, id="plain-class"),
            pytest.param(User(1, "a", "b"), id="instance"),
            pytest.param(int, id="builtin"),
        ],
    )
    def test_not_a_dataclass(self, cls):
        with pytest.raises(TypeError, match="derive expects a dataclass type"):
            derive(cls)

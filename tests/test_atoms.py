#
# Termfmt - Atoms Tests
#

# Standard library -----------------------------------------------------------------------------------------------------
import pickle

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from termfmt.atoms import ALIAS_PREFIX, Atom, AtomKind, inspect_atom


# Tests ----------------------------------------------------------------------------------------------------------------

class TestAtom:
    def test_interned(self):
        assert Atom("ok") is Atom("ok")
        assert Atom("ok") is not Atom("error")

    def test_repr_and_str(self):
        assert repr(Atom("ok")) == "Atom('ok')"
        assert str(Atom("ok")) == "ok"
        assert Atom("ok").name == "ok"

    def test_immutable(self):
        with pytest.raises(AttributeError):
            Atom("ok").name = "error"
        with pytest.raises(AttributeError):
            Atom("ok")._name = "error"

    def test_pickle_keeps_identity(self):
        assert pickle.loads(pickle.dumps(Atom("ok"))) is Atom("ok")

    def test_ordering_and_hash(self):
        assert sorted([Atom("b"), Atom("a")]) == [Atom("a"), Atom("b")]
        assert {Atom("a"): 1}[Atom("a")] == 1

    def test_not_equal_to_str(self):
        assert Atom("ok") != "ok"

    def test_name_must_be_str(self):
        with pytest.raises(TypeError):
            Atom(1)

    def test_alias(self):
        assert Atom(ALIAS_PREFIX + "Foo").is_alias
        assert not Atom("foo").is_alias


class TestInspectAtom:
    @pytest.mark.parametrize(
        "name, expected",
        [
            pytest.param("ok", ":ok", id="identifier"),
            pytest.param("valid?", ":valid?", id="question"),
            pytest.param("save!", ":save!", id="bang"),
            pytest.param("user@host", ":user@host", id="at-sign"),
            pytest.param("_private", ":_private", id="underscore"),
            pytest.param("+", ":+", id="operator"),
            pytest.param("<>", ":<>", id="concat-operator"),
            pytest.param("with space", ':"with space"', id="quoted"),
            pytest.param("1st", ':"1st"', id="leading-digit"),
            pytest.param('say "hi"', ':"say \\"hi\\""', id="escaped"),
            pytest.param("", ':""', id="empty"),
            pytest.param("Alias.Foo.Bar", "Foo.Bar", id="alias"),
            pytest.param("Alias.foo", ':"Alias.foo"', id="alias-lowercase"),
            pytest.param("Alias.", ':"Alias."', id="alias-empty"),
        ],
    )
    def test_literal(self, name, expected):
        assert inspect_atom(Atom(name)) == expected

    @pytest.mark.parametrize(
        "name, expected",
        [
            pytest.param("ok", "ok:", id="identifier"),
            pytest.param("valid?", "valid?:", id="question"),
            pytest.param("with space", '"with space":', id="quoted"),
            pytest.param("+", '"+":', id="operator"),
            pytest.param("a@b", '"a@b":', id="at-sign"),
        ],
    )
    def test_key(self, name, expected):
        assert inspect_atom(Atom(name), AtomKind.KEY) == expected
        assert inspect_atom(Atom(name), "key") == expected

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            inspect_atom(Atom("ok"), "remote_call")

#
# Termfmt - Algebra Tests
#

# Standard library -----------------------------------------------------------------------------------------------------
import math
from dataclasses import dataclass

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from termfmt.algebra import (
    BreakMode, color, concat, container_doc, decrement, flex_glue, fold, format_doc,
    glue, group, is_simple, nest,
)

RED = "\x1b[31m"
RESET = "\x1b[0m"


# Local Classes & Methods ----------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class Budget:
    limit: int | float = math.inf


def as_str(item, options):
    return str(item)


# Tests ----------------------------------------------------------------------------------------------------------------

class TestPrimitives:
    def test_concat_skips_empty(self):
        assert concat("", "a", "", "b") == concat("a", "b")
        assert concat() == ""

    def test_concat_layout(self):
        assert format_doc(concat("a", "b", "c"), 80) == "abc"

    @pytest.mark.parametrize(
        "width, expected",
        [
            pytest.param(80, "hello world", id="fits"),
            pytest.param(11, "hello world", id="exact"),
            pytest.param(5, "hello\nworld", id="breaks"),
            pytest.param(math.inf, "hello world", id="unbounded"),
        ],
    )
    def test_group_glue(self, width, expected):
        assert format_doc(group(glue("hello", " ", "world")), width) == expected

    def test_nest_indents_after_newline(self):
        doc = group(nest(glue("a", " ", "b"), 2))
        assert format_doc(doc, 1) == "a\n  b"

    def test_fold(self):
        doc = fold(["a", "b", "c"], lambda d, acc: glue(d, " ", acc))
        assert format_doc(doc, math.inf) == "a b c"
        assert fold([], lambda d, acc: d) == ""

    def test_flex_glue_fills_lines(self):
        doc = group(fold(["aaa", "bbb", "ccc"], lambda d, acc: flex_glue(d, " ", acc)))
        assert format_doc(doc, 7) == "aaa bbb\nccc"

    def test_color_is_zero_width(self):
        doc = group(glue(color("aaaa", RED, RESET), " ", "b"))
        assert format_doc(doc, 6) == f"{RED}aaaa{RESET} b"

    @pytest.mark.parametrize(
        "doc, expected",
        [
            pytest.param("x", True, id="string"),
            pytest.param(concat("x", "y"), True, id="concat"),
            pytest.param(color("x", RED, RESET), True, id="colored"),
            pytest.param(group("x"), False, id="group"),
            pytest.param(glue("x", " ", "y"), False, id="break"),
        ],
    )
    def test_is_simple(self, doc, expected):
        assert is_simple(doc) is expected

    @pytest.mark.parametrize(
        "limit, expected",
        [
            pytest.param(3, 2, id="positive"),
            pytest.param(0, 0, id="clamped"),
            pytest.param(math.inf, math.inf, id="unbounded"),
        ],
    )
    def test_decrement(self, limit, expected):
        assert decrement(limit) == expected


class TestContainerDoc:
    def test_empty(self):
        options = Budget(limit=3)
        doc, out = container_doc("[", [], "]", options, as_str)
        assert format_doc(doc, 80) == "[]"
        assert out is options

    def test_items(self):
        doc, out = container_doc("[", [1, 2, 3], "]", Budget(limit=10), as_str)
        assert format_doc(doc, 80) == "[1, 2, 3]"
        assert out.limit == 7

    def test_budget_elision(self):
        doc, out = container_doc("[", [1, 2, 3, 4], "]", Budget(limit=2), as_str)
        assert format_doc(doc, 80) == "[1, 2, ...]"
        assert out.limit == 0

    def test_zero_budget(self):
        doc, _ = container_doc("[", [1, 2, 3], "]", Budget(limit=0), as_str)
        assert format_doc(doc, 80) == "[...]"

    def test_reported_consumption_is_threaded(self):
        """Item functions returning options decide their own cost."""
        seen = []

        def costly(item, options):
            seen.append(options.limit)
            return str(item), Budget(limit=options.limit - 2)

        doc, out = container_doc("{", ["a", "b", "c"], "}", Budget(limit=4), costly)
        assert format_doc(doc, 80) == "{a, b, ...}"
        assert seen == [4, 2]
        assert out.limit == 0

    def test_custom_separator(self):
        doc, _ = container_doc("<", ["a", "b"], ">", Budget(), as_str, separator=";")
        assert format_doc(doc, 80) == "<a; b>"

    def test_strict_breaks_every_item(self):
        doc, _ = container_doc("%{", ["a: 1", "b: 2"], "}", Budget(), as_str, break_mode=BreakMode.STRICT)
        assert format_doc(doc, 80) == "%{a: 1, b: 2}"
        assert format_doc(doc, 10) == "%{\n  a: 1,\n  b: 2\n}"

    def test_flex_fills_lines(self):
        doc, _ = container_doc("{", ["aaaa", "bbbb", "cccc"], "}", Budget(), as_str, break_mode="flex")
        assert format_doc(doc, 12) == "{aaaa, bbbb,\n cccc}"

    def test_maybe_is_flex_for_simple_items(self):
        doc, _ = container_doc("[", ["aaaa", "bbbb", "cccc"], "]", Budget(), as_str)
        assert format_doc(doc, 12) == "[aaaa, bbbb,\n cccc]"

    def test_maybe_is_strict_for_nested_items(self):
        def nested(item, options):
            return container_doc("[", [item], "]", options, as_str)

        doc, _ = container_doc("[", ["aaaa", "bbbb"], "]", Budget(), nested)
        assert format_doc(doc, 10) == "[\n  [aaaa],\n  [bbbb]\n]"

    def test_invalid_break_mode(self):
        with pytest.raises(ValueError):
            container_doc("[", [1], "]", Budget(), as_str, break_mode="sometimes")

"""Tests for calcsheet.sheet module."""

import pytest

from calcsheet.scope import GlobalScope
from calcsheet.sheet import evaluate_lines, evaluate_text, split_text


class TestOrder:
    """A line only sees bindings from earlier lines."""

    def test_order_sensitivity(self):
        r = evaluate_lines(["a = 2", "b = a + 1 =>", "a = 5", "c = a + 1 =>"])
        assert r.results == {1: "3", 3: "6"}
        assert r.lines[1] == "b = a + 1 => 3"
        assert r.lines[3] == "c = a + 1 => 6"

    def test_reordering_changes_result(self):
        r = evaluate_lines(["a = 2", "a = 5", "b = a + 1 =>", "c = a + 1 =>"])
        assert r.results[2] == "6"

    def test_forward_reference_is_error(self):
        r = evaluate_lines(["b = a + 1 =>", "a = 2"])
        assert r.results == {0: "Error"}

    def test_call_before_definition_is_error(self):
        r = evaluate_lines(["y = f(2) =>", "f(x) = x"])
        assert r.results == {0: "Error"}


class TestFunctionBinding:
    """Free names in a function body are read when the function is called."""

    def test_late_binding(self):
        r = evaluate_lines([
            "f(x) = x + k",
            "k = 1",
            "y = f(2) =>",
            "k = 10",
            "z = f(2) =>",
        ])
        assert r.results == {2: "3", 4: "12"}

    def test_free_name_not_yet_defined(self):
        r = evaluate_lines(["f(x) = x + k", "y = f(2) =>", "k = 1"])
        assert r.results == {1: "Error"}

    def test_multiple_parameters(self):
        r = evaluate_lines(["area(w, h) = w * h", "area(3, 4) =>"])
        assert r.lines[1] == "area(3, 4) => 12"

    def test_redefinition_shadows(self):
        r = evaluate_lines(["f(x) = x", "f(2) =>", "f(x) = x * 10", "f(2) =>"])
        assert r.results == {1: "2", 3: "20"}


class TestErrors:
    """Errors stay on their own line."""

    def test_error_isolation(self):
        r = evaluate_lines([
            "w = 1/0 =>",
            "v = 2 * 3 =>",
            "this is ( not valid =>",
            "u = v + 1 =>",
        ])
        assert r.results == {0: "Error", 1: "6", 2: "Error", 3: "7"}
        assert r.lines[0] == "w = 1/0 => Error"

    def test_error_bound_to_name(self):
        r = evaluate_lines(["w = 1/0", "x = w + 1 =>"])
        assert r.results == {1: "Error"}
        assert "w" in r.scope.variables

    def test_huge_integer_does_not_stop_pass(self):
        r = evaluate_lines(["10 ** 5000 =>", "1 + 1 =>"])
        assert r.results == {0: "1e+5000", 1: "2"}


class TestMarker:
    """Marked lines get results, unmarked lines are left alone."""

    def test_bare_eval(self):
        assert evaluate_lines(["2 + 2 =>"]).lines == ["2 + 2 => 4"]

    def test_stale_value_replaced(self):
        assert evaluate_lines(["2 + 2 => 17"]).lines == ["2 + 2 => 4"]

    def test_spacing_normalised(self):
        assert evaluate_lines(["2+2=>"]).lines == ["2+2 => 4"]

    def test_unmarked_lines_untouched(self):
        lines = ["notes here", "a = 1", "   ", "2 + 2", "f(x) = x", "=> 4", "a = 1   "]
        r = evaluate_lines(lines)
        assert r.lines == lines
        assert r.results == {}

    def test_marked_definition_keeps_bare_marker(self):
        assert evaluate_lines(["f(x) = x * 2 =>"]).lines == ["f(x) = x * 2 =>"]
        assert evaluate_lines(["f(x) = x * 2 => 9"]).lines == ["f(x) = x * 2 =>"]

    def test_bare_eval_leaves_scope_alone(self):
        r = evaluate_lines(["a = 1", "a + 1 =>"])
        assert r.scope.variables == {"a": 1}
        assert r.values == {1: 2}

    def test_unmarked_assignment_has_no_result(self):
        r = evaluate_lines(["a = 1", "b = 2 =>"])
        assert r.results == {1: "2"}


class TestIdempotence:
    """A pass over canonical text changes nothing."""

    @pytest.mark.parametrize("lines", [
        ["a = 2", "b = a * 3 =>", "notes", "f(x) = x ^ 2 =>", "f(b) =>", "oops( =>"],
        ["v = [1, 2, 3] =>", "sum(v) =>", "z = sqrt(-1) =>", "'text' =>"],
        ["", "  x = 1 => 99", "x > 0 =>"],
        ["'a\\nb' =>", "s = 'x\\r\\ny' =>", "s =>"],
    ])
    def test_idempotent(self, lines):
        first = evaluate_lines(lines).lines
        second = evaluate_lines(first).lines
        assert second == first

    def test_line_break_in_result_keeps_line_count(self):
        once, _ = evaluate_text("'a\\nb' =>\nnext")
        assert once == "'a\\nb' => a\\nb\nnext"
        twice, _ = evaluate_text(once)
        assert twice == once

    def test_marker_inside_string(self):
        lines = ['s = "a => b"', 's + "!" =>']
        r = evaluate_lines(lines)
        assert r.lines == ['s = "a => b"', 's + "!" => a => b!']
        assert evaluate_lines(r.lines).lines == r.lines


class TestMinimalDiff:
    """Editing one line changes only that line's canonical text."""

    def test_single_line_edit(self):
        lines = [f"x{i} = {i} =>" for i in range(100)]
        canonical = evaluate_lines(lines).lines
        edited = list(canonical)
        edited[5] = "x5 = 500 =>"
        r = evaluate_lines(edited)
        assert r.changed_lines(edited) == [5]
        assert r.lines[5] == "x5 = 500 => 500"


class TestSeed:
    """Passes start from a copy of the seed."""

    def test_seed_bindings_visible(self):
        seed = GlobalScope({"rate": 2}, {})
        assert evaluate_lines(["x = rate * 10 =>"], seed).results == {0: "20"}

    def test_seed_not_mutated(self):
        seed = GlobalScope({"rate": 2}, {})
        r = evaluate_lines(["rate = 3", "x = rate =>"], seed)
        assert r.results == {1: "3"}
        assert seed.variables["rate"] == 2


class TestEvaluator:
    """A pass only uses evaluate() and format()."""

    class FakeEvaluator:
        def evaluate(self, expr, scope):
            return len(expr)

        def format(self, value):
            return f"<{value}>"

    def test_fake_evaluator(self):
        r = evaluate_lines(["a = xyz =>", "a =>"], evaluator=self.FakeEvaluator())
        assert r.lines == ["a = xyz => <3>", "a => <1>"]

    def test_format_failure_is_error(self):
        class BrokenFormat(self.FakeEvaluator):
            def format(self, value):
                if value == 3:
                    raise ValueError("cannot render")
                return str(value)

        r = evaluate_lines(["xyz =>", "ab =>"], evaluator=BrokenFormat())
        assert r.results == {0: "Error", 1: "2"}
        assert r.values[0] == 3


class TestText:
    """Whole-document helpers."""

    def test_crlf_and_trailing_newline_kept(self):
        out, _ = evaluate_text("a = 1 =>\r\nb = a =>\r\n")
        assert out == "a = 1 => 1\r\nb = a => 1\r\n"

    def test_split_text(self):
        assert split_text("a\nb") == (["a", "b"], "\n")

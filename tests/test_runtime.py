"""
Tests for the pylox runtime (values, interpreter, run).
"""

import io
import math

import pytest

from pylox import (
    scan, parse, run,
    Interpreter, Environment, RunResult,
    LoxTypeError, UndefinedVariableError, NotImplementedConstructError,
    LoxRuntimeError, Token, TokenType, Print, Unary, Literal,
)
from pylox.runtime import (
    Value, ValueKind, number_val, string_val, bool_val, TRUE, FALSE, NIL,
    is_equal, format_number, stringify,
)


def run_capture(source, environment=None):
    """Run source, returning (result, stdout text, stderr text)."""
    out, err = io.StringIO(), io.StringIO()
    result = run(source, environment=environment, interpreter=Interpreter(out, err))
    return result, out.getvalue(), err.getvalue()


def output_of(source):
    result, out, err = run_capture(source)
    assert result.success, err
    return out


# --- Value Tests ---

class TestValues:
    """Test runtime values."""

    def test_number_value(self):
        v = number_val(42)
        assert v.data == 42.0
        assert isinstance(v.data, float)
        assert v.kind == ValueKind.NUMBER

    def test_string_value(self):
        v = string_val("hello")
        assert v.data == "hello"
        assert v.kind == ValueKind.STRING

    def test_bool_values_are_shared(self):
        """bool_val returns the TRUE / FALSE singletons."""
        assert bool_val(True) is TRUE
        assert bool_val(False) is FALSE

    def test_values_are_immutable(self):
        """Values cannot be changed after creation."""
        v = number_val(1)
        with pytest.raises(Exception):
            v.data = 2.0

    def test_truthiness(self):
        """Only nil and false are falsy."""
        assert not NIL.is_truthy()
        assert not FALSE.is_truthy()
        assert TRUE.is_truthy()
        assert number_val(0).is_truthy()
        assert string_val("").is_truthy()


class TestEquality:
    """Equality is total and never raises."""

    def test_same_kind(self):
        assert is_equal(number_val(1), number_val(1))
        assert is_equal(string_val("a"), string_val("a"))
        assert is_equal(TRUE, TRUE)
        assert is_equal(NIL, NIL)
        assert not is_equal(number_val(1), number_val(2))

    def test_kind_mismatch(self):
        """Values of different kinds are never equal."""
        assert not is_equal(number_val(1), string_val("1"))
        assert not is_equal(NIL, FALSE)
        assert not is_equal(number_val(1), TRUE)
        assert not is_equal(number_val(0), FALSE)

    def test_total_over_all_pairs(self):
        """Every pair compares without error."""
        values = [number_val(0), number_val(1), string_val(""), string_val("a"), TRUE, FALSE, NIL]
        for a in values:
            for b in values:
                assert is_equal(a, b) == (a is b or (a.kind == b.kind and a.data == b.data))


class TestNumberFormatting:
    """Test number display."""

    def test_integers_have_no_fraction(self):
        assert format_number(20.0) == "20"
        assert format_number(-3.0) == "-3"
        assert format_number(1e12) == "1000000000000"

    def test_large_integers_use_shortest_digits(self):
        """1e23 is not exactly representable; print the digits that round-trip."""
        assert format_number(1e23) == "100000000000000000000000"
        assert output_of("print 100000000000000000000000;") == "100000000000000000000000\n"
        assert format_number(-1e21) == "-1000000000000000000000"

    def test_fractions(self):
        assert format_number(2.5) == "2.5"
        assert format_number(0.0001) == "0.0001"
        assert format_number(0.1 + 0.2) == "0.30000000000000004"

    def test_special_values(self):
        assert format_number(math.inf) == "inf"
        assert format_number(-math.inf) == "-inf"
        assert format_number(math.nan) == "NaN"
        assert format_number(-0.0) == "-0"
        assert format_number(0.0) == "0"

    def test_stringify(self):
        assert stringify(NIL) == "nil"
        assert stringify(TRUE) == "true"
        assert stringify(FALSE) == "false"
        assert stringify(string_val("x y")) == "x y"
        assert str(number_val(7)) == "7"


# --- Interpreter Tests ---

class TestArithmetic:
    """Test arithmetic evaluation through print."""

    def test_precedence(self):
        assert output_of("print (2 + 3) * 4;") == "20\n"
        assert output_of("print 2 + 3 * 4;") == "14\n"

    def test_left_associative(self):
        assert output_of("print 10 - 2 - 3;") == "5\n"
        assert output_of("print 16 / 4 / 2;") == "2\n"

    def test_unary_minus(self):
        assert output_of("print -(1 + 2);") == "-3\n"
        assert output_of("print --4;") == "4\n"

    def test_fractional_result(self):
        assert output_of("print 1 / 4;") == "0.25\n"
        assert output_of("print 1 / 3;") == "0.3333333333333333\n"

    def test_division_by_zero(self):
        """Division follows IEEE-754 rather than failing."""
        assert output_of("print 1 / 0;") == "inf\n"
        assert output_of("print -1 / 0;") == "-inf\n"
        assert output_of("print 0 / 0;") == "NaN\n"

    def test_negative_zero(self):
        assert output_of("print -0;") == "-0\n"

    def test_comparisons(self):
        assert output_of("print 1 < 2; print 2 <= 2; print 1 > 2; print 3 >= 4;") == \
            "true\ntrue\nfalse\nfalse\n"


class TestStringsAndEquality:
    """Test string concatenation and equality."""

    def test_concatenation(self):
        assert output_of('print "foo" + "bar";') == "foobar\n"

    def test_equality(self):
        assert output_of('print 1 == 1; print "a" == "a"; print 1 != 2;') == "true\ntrue\ntrue\n"

    def test_cross_kind_equality(self):
        """Comparing across kinds is false, never an error."""
        assert output_of('print 1 == "1"; print nil == false; print 0 == false;') == \
            "false\nfalse\nfalse\n"
        assert output_of('print 1 != "1";') == "true\n"

    def test_nil_equals_nil(self):
        assert output_of("print nil == nil;") == "true\n"


class TestTruthiness:
    """Test logical negation and logical operators."""

    def test_bang(self):
        assert output_of('print !nil; print !0; print !""; print !false;') == \
            "true\nfalse\nfalse\ntrue\n"

    def test_and_or_return_operand(self):
        """and/or yield the operand that decided the result."""
        assert output_of('print nil or "x";') == "x\n"
        assert output_of('print 1 and 2;') == "2\n"
        assert output_of('print false and 2;') == "false\n"

    def test_short_circuit(self):
        """The right operand is not evaluated when the left decides."""
        assert output_of("print false and undefined_name;") == "false\n"
        assert output_of("print true or undefined_name;") == "true\n"


class TestVariables:
    """Test declaration, lookup and assignment."""

    def test_lifecycle(self):
        """Declare without initializer, assign, redeclare."""
        source = 'var x; print x; x = 5; print x; var x = "re"; print x;'
        assert output_of(source) == "nil\n5\nre\n"

    def test_assignment_yields_value(self):
        assert output_of("var a; var b; a = b = 3; print a; print b;") == "3\n3\n"

    def test_initializer_sees_previous_binding(self):
        assert output_of("var a = 1; var a = a + 1; print a;") == "2\n"

    def test_undefined_variable(self):
        """Reading an undeclared name is a runtime error."""
        result, out, err = run_capture("print y;")
        assert out == ""
        assert result.had_runtime_error
        error = result.runtime_errors[0]
        assert isinstance(error, UndefinedVariableError)
        assert error.name == "y"
        assert "Undefined variable 'y'." in err

    def test_assign_undeclared(self):
        """Assignment does not create a binding."""
        result, _, _ = run_capture("y = 1;")
        assert isinstance(result.runtime_errors[0], UndefinedVariableError)

    def test_shared_environment(self):
        """Passing the same environment keeps bindings between runs."""
        env = Environment()
        run_capture("var count = 1;", env)
        _, out, _ = run_capture("count = count + 1; print count;", env)
        assert out == "2\n"


class TestRuntimeErrors:
    """Runtime errors stop one statement, not the run."""

    def test_type_error_contained(self):
        result, out, err = run_capture('print 1 + "a"; print 2;')
        assert out == "2\n"
        assert not result.success
        assert isinstance(result.runtime_errors[0], LoxTypeError)
        assert result.statements_executed == 2
        assert "[line 1] Error: Operands must be two numbers or two strings." in err

    def test_arithmetic_needs_numbers(self):
        result, _, err = run_capture('print "a" * 2;')
        assert isinstance(result.runtime_errors[0], LoxTypeError)
        assert "Operands must be numbers." in err

    def test_comparison_needs_numbers(self):
        result, _, err = run_capture('print "a" < "b";')
        assert "Operands must be numbers." in err

    def test_negate_needs_number(self):
        result, _, err = run_capture('print -"a";')
        assert isinstance(result.runtime_errors[0], LoxTypeError)
        assert "Not a valid operand." in err

    def test_error_line(self):
        """Runtime errors report the operator's line."""
        result, _, err = run_capture('print 1;\nprint true\n  - 1;')
        assert result.runtime_errors[0].line == 3
        assert err.startswith("[line 3] Error:")


class TestSyntaxErrorsAbortRun:
    """Any syntax error means nothing runs."""

    def test_error_in_second_of_three(self):
        result, out, err = run_capture("print 1;\nprint ;\nprint 3;")
        assert out == ""
        assert result.had_parse_error
        assert result.statements_executed == 0
        assert "[line 2] Error at ';': Expect expression." in err

    def test_unterminated_string(self):
        result, out, err = run_capture('print "abc')
        assert out == ""
        assert result.had_parse_error
        assert "Unterminated string." in err

    def test_diagnostics_returned(self):
        result, _, _ = run_capture("var = 1;")
        assert [d.code for d in result.diagnostics] == ["E101"]
        assert result.diagnostics[0].message == "Expect variable name."


class TestNotImplemented:
    """Reserved constructs fail with their own error kind."""

    @pytest.mark.parametrize("source, construct", [
        ("{ print 1; }", "block statement"),
        ("if (true) print 1;", "if statement"),
        ("while (false) print 1;", "while statement"),
        ("fun f() {}", "function statement"),
        ("class A {}", "class statement"),
        ("return 1;", "return statement"),
        ("f();", "call expression"),
        ("a.b;", "get expression"),
        ("this;", "this expression"),
    ])
    def test_construct(self, source, construct):
        result, out, err = run_capture(source)
        assert out == ""
        assert not result.had_parse_error
        error = result.runtime_errors[0]
        assert isinstance(error, NotImplementedConstructError)
        assert error.construct == construct
        assert f"Not implemented: {construct}." in err

    def test_distinct_from_runtime_errors(self):
        """Not-implemented is not a LoxRuntimeError subclass."""
        from pylox import LoxRuntimeError
        assert not issubclass(NotImplementedConstructError, LoxRuntimeError)

    def test_following_statements_run(self):
        result, out, _ = run_capture("{ } print 1;")
        assert out == "1\n"
        assert result.statements_executed == 2


class TestInterpreter:
    """Test the Interpreter directly."""

    def test_interpret_returns_none_on_success(self):
        statements, had_error = parse(scan("var x = 1;"))
        assert not had_error
        env = Environment()
        interp = Interpreter(io.StringIO(), io.StringIO())
        assert interp.interpret(statements[0], env) is None
        assert env.values["x"] == number_val(1)

    def test_evaluate_expression(self):
        statements, _ = parse(scan("1 + 2 * 3;"))
        value = Interpreter().evaluate(statements[0].expression, Environment())
        assert value == number_val(7)

    def test_default_streams(self, capsys):
        """Without explicit streams output goes to stdout / stderr."""
        run("print 1; print nil + 1;")
        captured = capsys.readouterr()
        assert captured.out == "1\n"
        assert "Operands must be two numbers or two strings." in captured.err

    def test_run_result(self):
        result = run("", interpreter=Interpreter(io.StringIO(), io.StringIO()))
        assert isinstance(result, RunResult)
        assert result.success
        assert result.statements_executed == 0


class TestDeepNesting:
    """Nesting too deep for the stack is reported, never raised."""

    def test_run_reports_syntax_error(self):
        result, out, err = run_capture("print " + "-" * 2000 + "1;\nprint 2;")
        assert out == ""
        assert result.had_parse_error
        assert [d.code for d in result.diagnostics] == ["E104"]
        assert "Expression nested too deeply." in err

    def test_nested_parentheses(self):
        result, _, _ = run_capture("print " + "(" * 500 + "1" + ")" * 500 + ";")
        assert result.had_parse_error
        assert result.diagnostics[0].code == "E104"

    def test_interpreter_reports_runtime_error(self):
        """A tree built without the parser still fails cleanly."""
        expr = Literal(number_val(1))
        for _ in range(5000):
            expr = Unary(Token(TokenType.MINUS, "-", 4), expr)
        err = io.StringIO()
        error = Interpreter(io.StringIO(), err).interpret(Print(expr), Environment())
        assert isinstance(error, LoxRuntimeError)
        assert error.code == "E203"
        assert error.line == 4
        assert err.getvalue() == "[line 4] Error: Expression nested too deeply.\n"

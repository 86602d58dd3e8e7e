import pytest

from npcdbg.expr import ExprError, ExpressionEvaluator, Token, TokenType, tokenize
from npcdbg.memory import Memory
from npcdbg.registers import REG_NAMES, RegisterFile

BASE = 0x80000000
MASK = 0xFFFFFFFF


@pytest.fixture
def evaluator():
    regs = RegisterFile()
    regs.load(range(100, 100 + len(REG_NAMES)))
    mem = Memory(base=BASE, size=0x100)
    return ExpressionEvaluator(regs, mem)


def test_tokenize_marks_leading_star_as_deref():
    tokens = tokenize("*0x10 + 2")
    assert [t.type for t in tokens] == [
        TokenType.DEREF, TokenType.HEXNUM, TokenType.SUM, TokenType.NUM,
    ]
    assert tokens[1] == Token(TokenType.HEXNUM, "0x10")


def test_tokenize_keeps_multiplication_after_number():
    assert [t.type for t in tokenize("3*4")] == [TokenType.NUM, TokenType.MU, TokenType.NUM]


def test_tokenize_strips_unsigned_suffix():
    assert tokenize("17u") == [Token(TokenType.NUM, "17")]


def test_tokenize_rejects_unknown_character():
    with pytest.raises(ExprError):
        tokenize("1 # 2")


def test_tokenize_rejects_overlong_number():
    with pytest.raises(ExprError):
        tokenize("1" * 40)


@pytest.mark.parametrize("text, expected", [
    ("42", 42),
    ("0x2A", 0x2A),
    ("17U", 17),
    ("010", 0o10),
    ("3 + 4", 3 + 4),
    ("2 * (3 + 4)", 2 * (3 + 4)),
    ("8 / 2 * 2", 8 // 2 * 2),
    ("8 * 2 / 4", 8 * 2 // 4),
    ("9 - 4 - 2", 9 - 4 - 2),
    ("(((7)))", 7),
])
def test_arithmetic(evaluator, text, expected):
    assert evaluator.evaluate(text) == expected


def test_subtraction_wraps_to_32_bits(evaluator):
    assert evaluator.evaluate("2 - 3") == (2 - 3) & MASK


def test_comparisons(evaluator):
    assert evaluator.evaluate("5 == 5") == 1
    assert evaluator.evaluate("5 != 5") == 0
    assert evaluator.evaluate("1 + 2 == 3") == 1


def test_logical_and(evaluator):
    assert evaluator.evaluate("3 && 0") == 0
    assert evaluator.evaluate("3 && 4") == 1


def test_register_lookup(evaluator):
    assert evaluator.evaluate("$a0") == evaluator.registers.get("a0")
    assert evaluator.evaluate("$sp + 1") == evaluator.registers.get("sp") + 1


def test_unknown_register(evaluator):
    with pytest.raises(ExprError):
        evaluator.evaluate("$zz")


def test_dereference_reads_memory(evaluator):
    evaluator.memory.write(BASE + 4, 4, 0xDEADBEEF)
    assert evaluator.evaluate(f"*{hex(BASE + 4)}") == 0xDEADBEEF
    assert evaluator.evaluate(f"*({hex(BASE)} + 4)") == 0xDEADBEEF


def test_addition_is_commutative(evaluator):
    assert evaluator.evaluate("0x10 + 7 * 3") == evaluator.evaluate("7 * 3 + 0x10")


@pytest.mark.parametrize("text", ["1 +", "(1", "1)", "-1", "1 2", "", "   "])
def test_malformed_expressions(evaluator, text):
    with pytest.raises(ExprError):
        evaluator.evaluate(text)


def test_division_by_zero(evaluator):
    with pytest.raises(ExprError):
        evaluator.evaluate("4 / 0")
"""Tokenizer and evaluator for debugger expressions."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Protocol

from npcdbg.registers import UnknownRegisterError
from npcdbg.state import WORD_MASK

_ULONG_MAX = (1 << 64) - 1
_MAX_TOKEN_LEN = 32


class ExprError(ValueError):
    """Raised for an expression that cannot be tokenized or evaluated."""


class TokenType(enum.IntEnum):
    """Token kinds; among operators a lower value binds more loosely."""

    NOTYPE = 256
    EQ = 257
    NEQ = 258
    AND = 259
    SUM = 260
    DIFF = 261
    DIVI = 262
    MU = 263
    DEREF = 264
    LE = 265
    RI = 266
    NUM = 267
    HEXNUM = 268
    REG = 269


@dataclass(frozen=True)
class Token:
    """One lexeme of an expression."""

    type: TokenType
    text: str = ""


_RULES = tuple(
    (re.compile(pattern), token_type)
    for pattern, token_type in (
        (r" +", TokenType.NOTYPE),
        (r"\+", TokenType.SUM),
        (r"-", TokenType.DIFF),
        (r"\*", TokenType.MU),
        (r"/", TokenType.DIVI),
        (r"\(", TokenType.LE),
        (r"\)", TokenType.RI),
        (r"0[xX][0-9a-fA-F]+", TokenType.HEXNUM),
        (r"[0-9]+[uU]?", TokenType.NUM),
        (r"\$[a-zA-Z_][a-zA-Z0-9_]*", TokenType.REG),
        (r"==", TokenType.EQ),
        (r"!=", TokenType.NEQ),
        (r"&&", TokenType.AND),
    )
)

_OPERANDS = (TokenType.NUM, TokenType.HEXNUM, TokenType.REG)


def tokenize(text: str) -> list[Token]:
    """Split an expression into tokens, dropping spaces and marking dereferences."""
    tokens: list[Token] = []
    pos = 0
    while pos < len(text):
        for pattern, token_type in _RULES:
            match = pattern.match(text, pos)
            if match:
                break
        else:
            raise ExprError(f"no match at position {pos}\n{text}\n{' ' * pos}^")
        lexeme = match.group()
        pos = match.end()
        if token_type is TokenType.NOTYPE:
            continue
        if token_type in _OPERANDS:
            if len(lexeme) > _MAX_TOKEN_LEN:
                raise ExprError(f"token too long: {lexeme!r}")
            if token_type is TokenType.NUM and lexeme[-1] in "uU":
                lexeme = lexeme[:-1]
        tokens.append(Token(token_type, lexeme))

    for i, token in enumerate(tokens):
        if token.type is not TokenType.MU:
            continue
        if i == 0:
            is_deref = True
        else:
            prev = tokens[i - 1].type
            is_deref = prev is TokenType.LE or TokenType.EQ <= prev <= TokenType.MU
        if is_deref:
            tokens[i] = Token(TokenType.DEREF, token.text)
    return tokens


class _Registers(Protocol):
    def get(self, name: str) -> int: ...


class _Memory(Protocol):
    def read(self, addr: int, length: int) -> int: ...


_ENCLOSED, _OPEN, _UNBALANCED = range(3)


def _paren_status(tokens: list[Token], p: int, q: int) -> int:
    """Whether tokens[p..q] is wrapped in one pair, merely balanced, or unbalanced."""
    close_partner: dict[int, int] = {}
    matched_open: set[int] = set()
    for i in range(q, p - 1, -1):
        if tokens[i].type is not TokenType.LE:
            continue
        for j in range(i, q + 1):
            if tokens[j].type is TokenType.RI and j not in close_partner:
                close_partner[j] = i
                matched_open.add(i)
                break
        if i not in matched_open:
            return _UNBALANCED
    for i in range(p, q + 1):
        if tokens[i].type is TokenType.RI and i not in close_partner:
            return _UNBALANCED
    return _ENCLOSED if close_partner.get(q) == p else _OPEN


def _parse_number(text: str) -> int:
    """Parse a literal the way a base-0 unsigned conversion does."""
    if text[:2].lower() == "0x":
        value = int(text[2:], 16)
    elif text.startswith("0"):
        digits = re.match(r"[0-7]*", text).group()
        value = int(digits, 8) if digits else 0
    else:
        value = int(text)
    return min(value, _ULONG_MAX) & WORD_MASK


class ExpressionEvaluator:
    """Evaluates expressions over registers and guest memory in 32-bit arithmetic."""

    def __init__(self, registers: _Registers, memory: _Memory) -> None:
        self.registers = registers
        self.memory = memory

    def evaluate(self, text: str) -> int:
        """Value of the expression as an unsigned 32-bit integer."""
        tokens = tokenize(text)
        if not tokens:
            raise ExprError("empty expression")
        return self._eval(tokens, 0, len(tokens) - 1)

    def _operand(self, token: Token) -> int:
        if token.type is TokenType.REG:
            try:
                return self.registers.get(token.text[1:])
            except UnknownRegisterError:
                raise ExprError(f"unknown register {token.text!r}") from None
        if token.type in (TokenType.NUM, TokenType.HEXNUM):
            return _parse_number(token.text)
        raise ExprError(f"expected an operand, got {token.type.name}")

    def _eval(self, tokens: list[Token], p: int, q: int) -> int:
        if p > q:
            raise ExprError("malformed expression")
        if p == q:
            return self._operand(tokens[p])
        if _paren_status(tokens, p, q) == _ENCLOSED:
            return self._eval(tokens, p + 1, q - 1)

        op: int | None = None
        op_type = TokenType.LE
        for i in range(p, q + 1):
            kind = tokens[i].type
            if (
                TokenType.EQ <= kind <= TokenType.DEREF
                and _paren_status(tokens, p, i - 1) != _UNBALANCED
                and _paren_status(tokens, i + 1, q) != _UNBALANCED
                and (op_type >= kind or (op_type is TokenType.DIVI and kind is TokenType.MU))
            ):
                op, op_type = i, kind
        if op is None:
            raise ExprError("no operator found")

        left = 0 if op_type is TokenType.DEREF else self._eval(tokens, p, op - 1)
        right = self._eval(tokens, op + 1, q)
        return self._apply(op_type, left, right)

    def _apply(self, op_type: TokenType, left: int, right: int) -> int:
        if op_type is TokenType.EQ:
            return int(left == right)
        if op_type is TokenType.NEQ:
            return int(left != right)
        if op_type is TokenType.AND:
            return int(bool(left) and bool(right))
        if op_type is TokenType.SUM:
            return (left + right) & WORD_MASK
        if op_type is TokenType.DIFF:
            return (left - right) & WORD_MASK
        if op_type is TokenType.DIVI:
            if right == 0:
                raise ExprError("division by zero")
            return left // right
        if op_type is TokenType.MU:
            return (left * right) & WORD_MASK
        return self.memory.read(right, 4)
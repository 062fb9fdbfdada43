from __future__ import annotations
from typing import Iterable, List

# Palette offered by the formula builder, in display order
FORMULA_TOKENS: List[str] = ["β0", "β1", "X", "Y", "ε", "log()", "µ", "σ", "n", "√", "^2", "Mean", "SD"]
OPERATOR_TOKENS: List[str] = ["+", "-", "*", "/"]


def palette() -> List[str]:
	return FORMULA_TOKENS + OPERATOR_TOKENS


def compose_formula(tokens: Iterable[str]) -> str:
	allowed = set(palette())
	parts: List[str] = []
	for token in tokens:
		if token not in allowed:
			raise ValueError(f"unknown formula token {token!r}")
		parts.append(token)
	return " ".join(parts)

from fastapi import APIRouter

from ..formula import FORMULA_TOKENS, OPERATOR_TOKENS

router = APIRouter(prefix="/formula", tags=["formula"])


@router.get("/tokens")
def get_tokens():
	return {"tokens": FORMULA_TOKENS, "operators": OPERATOR_TOKENS}

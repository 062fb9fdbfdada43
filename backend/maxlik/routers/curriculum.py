from fastapi import APIRouter, HTTPException

from ..curriculum import get_module, list_modules

router = APIRouter(prefix="/curriculum", tags=["curriculum"])


@router.get("/modules")
def get_modules():
	return [m.model_dump() for m in list_modules()]


@router.get("/modules/{module_id}")
def get_module_detail(module_id: int):
	try:
		module = get_module(module_id)
	except KeyError:
		raise HTTPException(status_code=404, detail=f"Module {module_id} not found")
	return module.model_dump()

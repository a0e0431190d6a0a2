import logging

from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..gemini_client import GeminiNotConfigured
from ..schemas import Principal
from ..services import EDITORS, require_role
from ..table_of_contents import generate_table_of_contents
from .auth import require_session

router = APIRouter(prefix="/admin/toc", tags=["toc"])
logger = logging.getLogger(__name__)


class TocRequest(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
	documentation_content: str


class TocResponse(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
	table_of_contents: str


@router.post("", response_model=TocResponse)
async def generate(req: TocRequest, principal: Principal = Depends(require_session)):
	require_role(principal, EDITORS)
	try:
		text = await generate_table_of_contents(req.documentation_content)
	except GeminiNotConfigured as e:
		raise HTTPException(status_code=503, detail=str(e))
	except RuntimeError as e:
		logger.error("table of contents generation failed: %s", e)
		raise HTTPException(status_code=502, detail=str(e))
	return TocResponse(table_of_contents=text)

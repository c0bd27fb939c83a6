from typing import Any, Dict, List, Optional
from urllib.parse import quote
import asyncio
import logging
import os

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

import resume_builder.config as cfg
from resume_builder.config import APP_VERSION, save_api_key
from resume_builder.models.schema import SkillSuggestion
from resume_builder.services.editor import SECTIONS, ResumeEditor, SuggestionOutcome
from resume_builder.services.export import Exporter, ExportResult
from resume_builder.services.validation import ValidationResult, validate

logger = logging.getLogger(__name__)

router = APIRouter()


class _Body(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FieldUpdate(_Body):
	field: str
	value: Any = None


class SummaryUpdate(_Body):
	value: str = ""


class SkillsRequest(_Body):
	job_title: Optional[str] = None


class ApplySkillsRequest(_Body):
	skills: List[SkillSuggestion]


def get_editor(request: Request) -> ResumeEditor:
	return request.app.state.editor


def get_exporter(request: Request) -> Exporter:
	return request.app.state.exporter


def _section(section: str) -> str:
	if section not in SECTIONS:
		raise HTTPException(status_code=404, detail=f"Unknown section: {section}")
	return section


def _suggestion_response(outcome: SuggestionOutcome, editor: ResumeEditor) -> Dict[str, Any]:
	if outcome.status == "busy":
		raise HTTPException(status_code=409, detail=f"A suggestion for {outcome.target} is already pending")
	if outcome.status == "missing":
		raise HTTPException(status_code=404, detail=f"Nothing to suggest for {outcome.target}")
	if outcome.status == "failed":
		raise HTTPException(status_code=502, detail=f"Suggestion failed: {outcome.error}")
	value = outcome.value
	if isinstance(value, list):
		value = [v.to_wire() if hasattr(v, "to_wire") else v for v in value]
	return {"target": outcome.target, "applied": outcome.applied, "value": value, "resume": editor.document.to_wire()}


def _export_response(result: ExportResult) -> Dict[str, Any]:
	if not result.success:
		raise HTTPException(status_code=502, detail=f"Export failed: {result.error}")
	return {"success": True, "filename": result.filename, "url": f"/files/{quote(result.filename)}"}


@router.get("/health")
async def health():
	return {"status": "ok", "version": APP_VERSION}


@router.get("/openai_key/status")
async def openai_key_status() -> Dict[str, bool]:
	return {"present": bool(cfg.OPENAI_API_KEY)}


@router.post("/openai_key")
async def set_openai_key(payload: Dict[str, str], editor: ResumeEditor = Depends(get_editor)):
	key = (payload or {}).get("api_key", "").strip()
	if not key:
		raise HTTPException(status_code=400, detail="api_key is required")
	os.environ["RESUME_BUILDER_OPENAI_API_KEY"] = key
	save_api_key(key)
	cfg.OPENAI_API_KEY = key
	from resume_builder.services.llm import reset_openai_client
	reset_openai_client()
	editor.reset_suggestions()
	logger.info("openai_key: updated; client and suggestion provider reset")
	return {"ok": True}


@router.get("/resume")
async def get_resume(editor: ResumeEditor = Depends(get_editor)):
	return editor.document.to_wire()


@router.post("/resume/reset")
async def reset_resume(editor: ResumeEditor = Depends(get_editor)):
	logger.info("resume: reset to defaults")
	return editor.reset().to_wire()


@router.put("/resume/personal-info")
async def set_personal_info(body: FieldUpdate, editor: ResumeEditor = Depends(get_editor)):
	editor.set_personal_info_field(body.field, body.value)
	return editor.document.to_wire()


@router.put("/resume/summary")
async def set_summary(body: SummaryUpdate, editor: ResumeEditor = Depends(get_editor)):
	editor.set_summary(body.value)
	return editor.document.to_wire()


@router.get("/resume/validation", response_model=ValidationResult)
async def validate_resume(editor: ResumeEditor = Depends(get_editor)):
	return validate(editor.document)


@router.post("/resume/skills/apply")
async def apply_skills(body: ApplySkillsRequest, editor: ResumeEditor = Depends(get_editor)):
	added = editor.apply_skill_suggestions(body.skills)
	logger.info("skills: applied %d of %d suggestions", len(added), len(body.skills))
	return {"added": [s.to_wire() for s in added], "resume": editor.document.to_wire()}


@router.post("/resume/{section}")
async def add_entity(section: str, editor: ResumeEditor = Depends(get_editor)):
	return editor.add(_section(section)).to_wire()


@router.patch("/resume/{section}/{entity_id}")
async def update_entity(section: str, entity_id: str, body: FieldUpdate, editor: ResumeEditor = Depends(get_editor)):
	editor.update(_section(section), entity_id, body.field, body.value)
	return editor.document.to_wire()


@router.delete("/resume/{section}/{entity_id}")
async def remove_entity(section: str, entity_id: str, editor: ResumeEditor = Depends(get_editor)):
	editor.remove(_section(section), entity_id)
	return editor.document.to_wire()


@router.post("/suggest/summary")
async def suggest_summary(editor: ResumeEditor = Depends(get_editor)):
	return _suggestion_response(await editor.suggest_summary(), editor)


@router.post("/suggest/experience/{entity_id}")
async def suggest_job_description(entity_id: str, editor: ResumeEditor = Depends(get_editor)):
	return _suggestion_response(await editor.suggest_job_description(entity_id), editor)


@router.post("/suggest/education/{entity_id}")
async def suggest_education_description(entity_id: str, editor: ResumeEditor = Depends(get_editor)):
	return _suggestion_response(await editor.suggest_education_description(entity_id), editor)


@router.post("/suggest/skills")
async def suggest_skills(body: Optional[SkillsRequest] = None, editor: ResumeEditor = Depends(get_editor)):
	job_title = body.job_title if body else None
	return _suggestion_response(await editor.suggest_skills(job_title), editor)


@router.post("/suggest/improve")
async def improve_text(body: Dict[str, str], editor: ResumeEditor = Depends(get_editor)):
	target = (body or {}).get("target", "").strip()
	if not target:
		raise HTTPException(status_code=400, detail="target is required")
	return _suggestion_response(await editor.improve_text(target), editor)


@router.post("/export/pdf")
async def export_pdf(editor: ResumeEditor = Depends(get_editor), exporter: Exporter = Depends(get_exporter)):
	return _export_response(await exporter.export_pdf(editor.document))


@router.post("/export/docx")
async def export_docx(editor: ResumeEditor = Depends(get_editor), exporter: Exporter = Depends(get_exporter)):
	return _export_response(await asyncio.to_thread(exporter.export_docx, editor.document))

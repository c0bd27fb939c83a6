import logging
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

import resume_builder.config as cfg
from resume_builder.routers.editor import router as editor_router
from resume_builder.services.editor import ResumeEditor
from resume_builder.services.export import Exporter
from resume_builder.services.render import render_preview_html

# Configure logging
logging.basicConfig(
	level=logging.INFO,
	format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Resume Builder", version=cfg.APP_VERSION)

# One document per running app; every route goes through this editor
app.state.editor = ResumeEditor()
app.state.exporter = Exporter()

# Serve exported files for download
app.mount("/files", StaticFiles(directory=str(cfg.OUTPUT_DIR)), name="files")

templates = Jinja2Templates(directory=str(cfg.VIEWS_DIR))

@app.on_event("startup")
async def on_startup():
	logger.info("App starting. version=%s", cfg.APP_VERSION)
	logger.info("output_dir=%s", cfg.OUTPUT_DIR)
	logger.info("suggestions_backend=%s openai_key_present=%s", cfg.SUGGESTIONS_BACKEND, bool(cfg.OPENAI_API_KEY))

@app.get("/", response_class=HTMLResponse)
async def index(request: Request):
	return templates.TemplateResponse(request, "index.html", {"version": cfg.APP_VERSION})

@app.get("/builder", response_class=HTMLResponse)
async def builder(request: Request):
	return templates.TemplateResponse(request, "builder.html", {"version": cfg.APP_VERSION})

@app.get("/preview", response_class=HTMLResponse)
async def preview(request: Request):
	return HTMLResponse(render_preview_html(request.app.state.editor.document))

# API routes
app.include_router(editor_router, prefix="/api")

from __future__ import annotations
from io import BytesIO
from pathlib import Path
from typing import Awaitable, Callable, Optional, Tuple
import asyncio
import logging
import re

import docx
from docx.enum.text import WD_TAB_ALIGNMENT
from docx.shared import Pt
from PIL import Image
from playwright.async_api import async_playwright
from pydantic import BaseModel

import resume_builder.config as cfg
from resume_builder.models.schema import Resume
from resume_builder.services.render import CONTENT_ELEMENT_ID, date_range, group_skills, render_preview_html
from resume_builder.services.styles import load_style_names

logger = logging.getLogger(__name__)

A4_MM = (210.0, 297.0)
MM_PER_INCH = 25.4

# (html, element id) -> PNG bytes of that element
Rasterizer = Callable[[str, str], Awaitable[bytes]]

_UNSAFE_FILENAME_RE = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


class ExportError(Exception):
	pass


class ExportResult(BaseModel):
	success: bool
	filename: Optional[str] = None
	path: Optional[str] = None
	error: Optional[str] = None


def export_filename(document: Resume, extension: str = "pdf") -> str:
	"""'<full name>.<ext>', or 'Resume.<ext>' when the name is blank."""
	name = _UNSAFE_FILENAME_RE.sub("", document.personal_info.full_name or "").strip()
	return f"{name or 'Resume'}.{extension}"


def page_size_px(dpi: int) -> Tuple[int, int]:
	return tuple(round(mm / MM_PER_INCH * dpi) for mm in A4_MM)


def fit_to_page(image_size: Tuple[float, float], page_size: Tuple[float, float]) -> Tuple[float, float, float, float]:
	"""Scale an image uniformly to fit the page and centre it. Returns (x, y, width, height)."""
	iw, ih = image_size
	pw, ph = page_size
	if iw <= 0 or ih <= 0:
		raise ExportError("rendered image is empty")
	scale = min(pw / iw, ph / ih)
	w, h = iw * scale, ih * scale
	return (pw - w) / 2, (ph - h) / 2, w, h


def compose_pdf(png: bytes, dpi: Optional[int] = None) -> bytes:
	"""Place a raster on a single white A4 portrait page and return the PDF bytes."""
	dpi = dpi or cfg.PDF_DPI
	img = Image.open(BytesIO(png))
	if img.mode != "RGB":
		rgba = img.convert("RGBA")
		img = Image.new("RGB", rgba.size, "white")
		img.paste(rgba, mask=rgba.split()[3])
	page_w, page_h = page_size_px(dpi)
	x, y, w, h = fit_to_page(img.size, (page_w, page_h))
	page = Image.new("RGB", (page_w, page_h), "white")
	page.paste(img.resize((max(1, round(w)), max(1, round(h))), Image.Resampling.LANCZOS), (round(x), round(y)))
	out = BytesIO()
	page.save(out, format="PDF", resolution=float(dpi))
	return out.getvalue()


async def playwright_rasterizer(html: str, element_id: str) -> bytes:
	async with async_playwright() as p:
		browser = await p.chromium.launch()
		try:
			page = await browser.new_page(device_scale_factor=cfg.EXPORT_SCALE)
			await page.set_content(html, wait_until="load")
			element = await page.query_selector(f"#{element_id}")
			if element is None:
				raise ExportError("Element not found")
			return await element.screenshot(type="png", omit_background=False)
		finally:
			await browser.close()


def build_docx(document: Resume) -> "docx.document.Document":
	styles = load_style_names()
	out = docx.Document()
	section = out.sections[0]
	usable_width = section.page_width - section.left_margin - section.right_margin
	info = document.personal_info

	out.add_paragraph(info.full_name or "Your Name", style=styles["name"])
	contact = [v for v in (info.email, info.phone, info.location, info.website, info.linkedin, info.github) if v]
	if contact:
		out.add_paragraph(" | ".join(contact), style=styles["contact"])

	def heading(text: str) -> None:
		out.add_paragraph(text, style=styles["section_heading"])

	def entry(title: str, dates: str) -> None:
		# Title left, dates on a right-aligned tab stop
		p = out.add_paragraph(f"{title}\t{dates}" if dates else title, style=styles["entry_heading"])
		p.paragraph_format.tab_stops.add_tab_stop(usable_width, alignment=WD_TAB_ALIGNMENT.RIGHT)
		p.paragraph_format.space_after = Pt(0)

	def meta(*parts: Optional[str]) -> None:
		text = " • ".join(p for p in parts if p)
		if text:
			out.add_paragraph(text, style=styles["meta"])

	if document.summary:
		heading("Professional Summary")
		out.add_paragraph(document.summary, style=styles["body"])

	if document.experience:
		heading("Professional Experience")
		for exp in document.experience:
			entry(exp.job_title, date_range(exp.start_date, exp.end_date, exp.is_current_job))
			meta(exp.company, exp.location)
			if exp.description:
				out.add_paragraph(exp.description, style=styles["body"])

	if document.education:
		heading("Education")
		for edu in document.education:
			entry(edu.degree, date_range(edu.start_date, edu.end_date, edu.is_current_study))
			meta(edu.institution, edu.location)
			if edu.gpa:
				out.add_paragraph(f"GPA: {edu.gpa}", style=styles["meta"])
			if edu.description:
				out.add_paragraph(edu.description, style=styles["body"])

	if document.skills:
		heading("Skills")
		for category, skills in group_skills(document.skills):
			p = out.add_paragraph(style=styles["bullet"])
			p.add_run(f"{category}: ").bold = True
			p.add_run(", ".join(s.name for s in skills))

	if document.projects:
		heading("Projects")
		for project in document.projects:
			entry(project.name, date_range(project.start_date, project.end_date))
			out.add_paragraph(project.description, style=styles["body"])
			meta(f"Technologies: {project.technologies}" if project.technologies else "", project.url, project.github)

	if document.certificates:
		heading("Certifications")
		for cert in document.certificates:
			entry(cert.name, cert.issue_date)
			meta(cert.issuer, f"Credential ID: {cert.credential_id}" if cert.credential_id else "", cert.url)

	return out


class Exporter:
	"""Turns a resume into files. Reads the document only; failures come back as ExportResult."""

	def __init__(self, output_dir: Optional[Path] = None, rasterizer: Optional[Rasterizer] = None, dpi: Optional[int] = None):
		self.output_dir = Path(output_dir or cfg.OUTPUT_DIR)
		self.rasterizer = rasterizer or playwright_rasterizer
		self.dpi = dpi or cfg.PDF_DPI

	async def _pdf_bytes(self, document: Resume) -> bytes:
		html = render_preview_html(document, standalone=True)
		png = await self.rasterizer(html, CONTENT_ELEMENT_ID)
		return await asyncio.to_thread(compose_pdf, png, self.dpi)

	async def render_pdf_bytes(self, document: Resume) -> Optional[bytes]:
		try:
			return await self._pdf_bytes(document)
		except Exception:
			logger.exception("export: pdf rendering failed")
			return None

	async def export_pdf(self, document: Resume, filename: Optional[str] = None) -> ExportResult:
		filename = filename or export_filename(document, "pdf")
		try:
			data = await self._pdf_bytes(document)
			self.output_dir.mkdir(parents=True, exist_ok=True)
			path = self.output_dir / filename
			path.write_bytes(data)
		except Exception as e:
			logger.exception("export: pdf export failed filename=%s", filename)
			return ExportResult(success=False, filename=filename, error=str(e) or e.__class__.__name__)
		logger.info("export: wrote pdf=%s bytes=%d", path, len(data))
		return ExportResult(success=True, filename=filename, path=str(path))

	def export_docx(self, document: Resume, filename: Optional[str] = None) -> ExportResult:
		filename = filename or export_filename(document, "docx")
		try:
			self.output_dir.mkdir(parents=True, exist_ok=True)
			path = self.output_dir / filename
			build_docx(document).save(str(path))
		except Exception as e:
			logger.exception("export: docx export failed filename=%s", filename)
			return ExportResult(success=False, filename=filename, error=str(e) or e.__class__.__name__)
		logger.info("export: wrote docx=%s", path)
		return ExportResult(success=True, filename=filename, path=str(path))

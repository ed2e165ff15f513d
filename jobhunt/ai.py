"""AI collaborator: résumé text extraction, job-description fetching and ATS scoring.

Model calls go through the OpenAI SDK pointed at Groq's OpenAI-compatible
endpoint. Every operation is a single attempt; nothing is retried.
"""
from __future__ import annotations

import asyncio
import io
import json
import re
from typing import Any

import requests
from bs4 import BeautifulSoup

from jobhunt.config import Settings, load_settings
from jobhunt.log import get_logger
from jobhunt.models import MatchReport

log = get_logger(__name__)

FETCH_FAILED = "Could not pull details. You may need to paste the description manually."

_USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0 Safari/537.36"
_MAX_PAGE_CHARS = 15000
_MAX_PROMPT_CHARS = 12000


class ExtractionError(RuntimeError):
    pass


class FetchError(RuntimeError):
    pass


# ── PDF text ─────────────────────────────────────────────────────────────


def _fix_spacing(text: str) -> str:
    """Re-insert spaces when PDF extraction merges words together.

    Detects the problem by checking if the space-to-character ratio is
    abnormally low, then applies heuristic space insertion.
    """
    if not text or len(text) < 50:
        return text
    space_ratio = text.count(" ") / len(text)
    if space_ratio > 0.08:
        return text

    log.debug("Low space ratio (%.2f%%) — applying spacing fix", space_ratio * 100)
    fixed = re.sub(r"([a-z])([A-Z])", r"\1 \2", text)
    fixed = re.sub(r"([a-zA-Z])(\d)", r"\1 \2", fixed)
    fixed = re.sub(r"(\d)([a-zA-Z])", r"\1 \2", fixed)
    fixed = re.sub(r"([.!?,;:])([A-Za-z])", r"\1 \2", fixed)
    return fixed


def _read_pdf(data: bytes) -> str:
    from pypdf import PdfReader

    reader = PdfReader(io.BytesIO(data))
    return "\n".join(_fix_spacing(page.extract_text() or "") for page in reader.pages)


# ── Job page text ────────────────────────────────────────────────────────


def _download_page_text(url: str) -> str:
    r = requests.get(url, headers={"User-Agent": _USER_AGENT}, timeout=20)
    r.raise_for_status()
    soup = BeautifulSoup(r.text, "html.parser")
    for tag in soup(["script", "style", "noscript", "svg", "header", "footer", "nav"]):
        tag.decompose()
    lines = [line.strip() for line in soup.get_text("\n").splitlines()]
    return "\n".join(line for line in lines if line)[:_MAX_PAGE_CHARS]


# ── Prompts ──────────────────────────────────────────────────────────────

_FETCH_PROMPT = """\
Below is the visible text of the web page at {url}.
Extract the full job description, including responsibilities, requirements,
and company details. Format it as plain text without any markdown or
conversational filler. If the page does not contain a job description,
return an empty response.

Page text:
{page_text}
"""

_MATCH_PROMPT = """\
Compare the following Resume and Job Description for an ATS (Applicant Tracking System) check.

RESUME:
{resume_text}

JOB DESCRIPTION:
{job_description}

Return ONLY a JSON object with this exact structure:
{{
  "score": number (0-100),
  "missingKeywords": string[] (top 5 important skills/keywords missing from resume),
  "strengths": string[] (top 3 areas where the candidate matches well),
  "suggestions": string (short advice on how to improve the resume for this specific JD)
}}
"""


def _parse_json_object(raw: str) -> dict[str, Any]:
    start = raw.find("{")
    end = raw.rfind("}") + 1
    if start == -1 or end == 0:
        raise ValueError("LLM did not return valid JSON")
    return json.loads(raw[start:end])


class AIClient:
    """Async wrapper around the remote model; the SDK client is created lazily."""

    def __init__(self, settings: Settings | None = None, client: Any = None) -> None:
        self.settings = settings or load_settings()
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            if not self.settings.api_key:
                raise RuntimeError("GROQ_API_KEY is not set")
            from openai import AsyncOpenAI

            self._client = AsyncOpenAI(api_key=self.settings.api_key, base_url=self.settings.base_url)
        return self._client

    async def _complete(
        self,
        model: str,
        prompt: str,
        *,
        max_tokens: int,
        temperature: float,
        json_mode: bool = False,
    ) -> str:
        extra: dict[str, Any] = {}
        if json_mode:
            extra["response_format"] = {"type": "json_object"}
        resp = await self.client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=max_tokens,
            temperature=temperature,
            **extra,
        )
        return (resp.choices[0].message.content or "").strip()

    async def extract_resume_text(self, data: bytes) -> str:
        """Plain text of a résumé PDF; raises ExtractionError when there is none."""
        if not data:
            raise ExtractionError("The uploaded file is empty.")
        try:
            text = await asyncio.to_thread(_read_pdf, data)
        except Exception as exc:
            log.warning("PDF extraction failed: %s", exc)
            raise ExtractionError(f"Failed to extract text from PDF: {exc}") from exc
        text = text.strip()
        if not text:
            raise ExtractionError("No text could be extracted from the PDF.")
        log.info("Extracted %d characters of résumé text", len(text))
        return text

    async def fetch_job_description(self, url: str) -> str:
        url = (url or "").strip()
        if not url:
            raise FetchError("Please provide a valid Job URL first.")
        try:
            page_text = await asyncio.to_thread(_download_page_text, url)
            prompt = _FETCH_PROMPT.format(url=url, page_text=page_text)
            text = await self._complete(
                self.settings.text_model, prompt, max_tokens=2000, temperature=0.1,
            )
        except Exception as exc:
            log.warning("Job description fetch failed for %s: %s", url, exc)
            raise FetchError(FETCH_FAILED) from exc
        if not text:
            log.warning("Model returned no job description for %s", url)
            raise FetchError(FETCH_FAILED)
        log.info("Fetched job description from %s (%d chars)", url, len(text))
        return text

    async def compute_match_report(self, resume_text: str, job_description: str) -> MatchReport | None:
        """ATS match report, or None when an input is empty or the call fails."""
        if not (resume_text or "").strip() or not (job_description or "").strip():
            return None
        prompt = _MATCH_PROMPT.format(
            resume_text=resume_text[:_MAX_PROMPT_CHARS],
            job_description=job_description[:_MAX_PROMPT_CHARS],
        )
        try:
            raw = await self._complete(
                self.settings.analysis_model, prompt,
                max_tokens=800, temperature=0.2, json_mode=True,
            )
            report = MatchReport.from_dict(_parse_json_object(raw))
        except ValueError as exc:
            log.warning("ATS analysis returned an unusable answer: %s", exc)
            return None
        except Exception as exc:
            log.warning("ATS analysis failed: %s", exc)
            return None
        log.info("ATS match score: %d%%", report.score)
        return report

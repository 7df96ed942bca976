"""
Plain-language case summaries for the portal.

Asks Gemini for a short status summary when GEMINI_API_KEY is configured.
Every failure path (no key, HTTP error, empty answer, unparseable JSON)
returns the rule-based summary keyed on the current stage slug instead.
"""

import json
import re
from dataclasses import dataclass, field

import httpx
from django.conf import settings

from apps.cases.models import Case, CaseStageHistory, ClientNote
from apps.core.logging import get_logger

logger = get_logger(__name__)

GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models"
GEMINI_TIMEOUT_SECONDS = 20.0
RECENT_NOTES_LIMIT = 3

_CODE_FENCE = re.compile(r"```(?:json)?\n?")

PROMPT_TEMPLATE = """You are a friendly customer service assistant for a company that helps \
healthcare professionals with licensing and credential verification.

Based on the following case information, generate a helpful summary for the client \
(the applicant). Be warm, reassuring, and clear.

{context}

Respond in JSON format with this exact structure:
{{
  "summary": "A 2-3 sentence friendly summary of where their application stands",
  "next_steps": ["Array of 2-3 actionable next steps or what to expect"],
  "estimated_progress": A number from 0-100 representing how far along the process is,
  "alerts": ["Optional array of any urgent actions needed from client, or empty array"]
}}

Only respond with valid JSON, no additional text."""


@dataclass
class CaseSummary:
    summary: str
    next_steps: list[str] = field(default_factory=list)
    estimated_progress: int = 0
    alerts: list[str] = field(default_factory=list)
    source: str = "fallback"


def build_context(case: Case) -> str:
    """Render the facts about a case that the summary is allowed to use."""
    pipeline_name = case.pipeline.name if case.pipeline_id else "Application"
    stage_name = case.current_stage.name if case.current_stage else "Processing"
    first_name = case.person.first_name or "Client"

    lines = [
        "CASE INFORMATION:",
        f"- Application Type: {pipeline_name}",
        f"- Current Stage: {stage_name}",
        f"- Status: {case.status or 'active'}",
        f"- Client Name: {first_name}",
    ]

    history = list(
        CaseStageHistory.objects.filter(case=case)
        .select_related("to_stage")
        .order_by("created_at", "id")
    )
    if history:
        lines.append("")
        lines.append(f"PROGRESS HISTORY ({len(history)} stages completed):")
        lines.extend(f"{i}. {h.to_stage.name}" for i, h in enumerate(history, start=1))

    notes = list(
        ClientNote.objects.filter(case=case, is_client_visible=True).order_by(
            "-created_at", "-id"
        )[:RECENT_NOTES_LIMIT]
    )
    if notes:
        lines.append("")
        lines.append("RECENT UPDATES:")
        lines.extend(f"- {n.content}" for n in notes)

    metadata = case.metadata or {}
    missing = metadata.get("missingDocument") or metadata.get("missingInformation")
    if missing:
        lines.append("")
        lines.append("PENDING ITEMS:")
        lines.append(f"- Missing: {missing}")

    if metadata.get("actionRequiredFromClient"):
        lines.append("")
        lines.append("ACTION REQUIRED: Yes, client needs to provide information or documents.")

    return "\n".join(lines)


def fallback_summary(case: Case) -> CaseSummary:
    """Rule-based summary from the current stage slug."""
    pipeline_name = case.pipeline.name if case.pipeline_id else "Application"
    stage = case.current_stage
    stage_name = stage.name if stage else "Processing"
    slug = stage.slug if stage else ""
    metadata = case.metadata or {}

    if "new" in slug or "intake" in slug:
        return CaseSummary(
            summary=(
                f"We've received your {pipeline_name} application and it's being "
                "reviewed by our team."
            ),
            next_steps=[
                "Our team will review your initial documents",
                "You may receive requests for additional information",
            ],
            estimated_progress=15,
        )
    if "document" in slug or "pending" in slug:
        alerts = []
        if metadata.get("actionRequiredFromClient"):
            alerts.append("Please check your email for pending document requests")
        return CaseSummary(
            summary=(
                f"We're processing your {pipeline_name} application and may need "
                "some additional documents."
            ),
            next_steps=[
                "Check your email for any document requests",
                "Upload requested documents as soon as possible",
            ],
            estimated_progress=35,
            alerts=alerts,
        )
    if "review" in slug or "processing" in slug:
        return CaseSummary(
            summary=(
                f"Your {pipeline_name} application is being actively processed by "
                "our specialists."
            ),
            next_steps=[
                "Our team is working on your case",
                "We will update you on any developments",
            ],
            estimated_progress=55,
        )
    if "submit" in slug or "verification" in slug:
        return CaseSummary(
            summary=(
                f"Your {pipeline_name} application has been submitted and is "
                "awaiting verification."
            ),
            next_steps=[
                "Verification typically takes 2-4 weeks",
                "We will notify you once verification is complete",
            ],
            estimated_progress=75,
        )
    if "complete" in slug or "approved" in slug:
        return CaseSummary(
            summary=f"Congratulations! Your {pipeline_name} has been completed successfully.",
            next_steps=[
                "Check your email for final documentation",
                "Contact us if you need any additional assistance",
            ],
            estimated_progress=100,
        )
    return CaseSummary(
        summary=f'Your {pipeline_name} is currently in the "{stage_name}" stage.',
        estimated_progress=30,
    )


def parse_summary_text(text: str) -> CaseSummary:
    """
    Parse the model's JSON answer, tolerating markdown code fences.

    Accepts camelCase keys as well.

    Raises:
        ValueError: If the text is not a JSON object with a summary
    """
    cleaned = _CODE_FENCE.sub("", text).strip()
    data = json.loads(cleaned)
    if not isinstance(data, dict) or not data.get("summary"):
        raise ValueError("Summary JSON has no summary field")

    next_steps = data.get("next_steps", data.get("nextSteps")) or []
    progress = data.get("estimated_progress", data.get("estimatedProgress", 0))
    alerts = data.get("alerts") or []

    return CaseSummary(
        summary=str(data["summary"]),
        next_steps=[str(s) for s in next_steps],
        estimated_progress=max(0, min(100, int(progress))),
        alerts=[str(a) for a in alerts],
        source="ai",
    )


def _ask_gemini(context: str) -> str | None:
    response = httpx.post(
        f"{GEMINI_API_URL}/{settings.GEMINI_MODEL}:generateContent",
        params={"key": settings.GEMINI_API_KEY},
        json={
            "contents": [{"parts": [{"text": PROMPT_TEMPLATE.format(context=context)}]}],
            "generationConfig": {"temperature": 0.7, "maxOutputTokens": 500},
        },
        timeout=GEMINI_TIMEOUT_SECONDS,
    )
    response.raise_for_status()
    try:
        data = response.json()
        return data["candidates"][0]["content"]["parts"][0]["text"]
    except ValueError as e:
        # Non-JSON 2xx bodies, e.g. a proxy error page
        logger.warning("case_summary_upstream_not_json", error=str(e))
        return None
    except (KeyError, IndexError, TypeError):
        return None


def generate_case_summary(case: Case) -> CaseSummary:
    """Summary for the portal, from Gemini when available."""
    if not settings.GEMINI_API_KEY:
        return fallback_summary(case)

    try:
        text = _ask_gemini(build_context(case))
    except httpx.HTTPError as e:
        logger.warning("case_summary_upstream_failed", case_id=str(case.id), error=str(e))
        return fallback_summary(case)

    if not text:
        logger.warning("case_summary_empty", case_id=str(case.id))
        return fallback_summary(case)

    try:
        return parse_summary_text(text)
    except (ValueError, TypeError) as e:
        # json.JSONDecodeError is a ValueError
        logger.warning("case_summary_unparseable", case_id=str(case.id), error=str(e))
        return fallback_summary(case)

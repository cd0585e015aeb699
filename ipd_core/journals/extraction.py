# ipd_core/journals/extraction.py
"""
Turn a dictated transcript into a suggested payload for a journal category.

The provider is a generateContent-style endpoint (TEXT_EXTRACTION_URL) that
answers with JSON text. Suggestions only pre-fill a form: any failure gives
an empty suggestion and a warning in the log, never an API error.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict

import requests
from django.conf import settings

from ipd_core.journals.categories import CategorySpec

logger = logging.getLogger(__name__)


def build_prompt(spec: CategorySpec, transcript: str) -> str:
    keys = ", ".join(spec.field_names)
    return (
        f"Extract these as JSON with keys:\n{keys}\n"
        f'from this text:\n"{transcript}". '
        'Use ISO "YYYY-MM-DDTHH:MM" for date_time if provided, otherwise leave it empty.'
    )


def _response_text(data: Dict[str, Any]) -> str:
    try:
        return data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return ""


def clean_suggestion(spec: CategorySpec, raw: Any) -> Dict[str, Any]:
    """Keep only non-empty values for fields the category knows about."""
    if not isinstance(raw, dict):
        return {}

    allowed = set(spec.field_names)
    out: Dict[str, Any] = {}
    for key, val in raw.items():
        if key not in allowed or val is None:
            continue
        if isinstance(val, (dict, list)):
            if val:
                out[key] = val
            continue
        if str(val).strip():
            out[key] = str(val).strip()
    return out


def suggest_payload(spec: CategorySpec, transcript: str) -> Dict[str, Any]:
    url = getattr(settings, "TEXT_EXTRACTION_URL", "") or ""
    if not url:
        logger.warning("text extraction requested but TEXT_EXTRACTION_URL is not configured")
        return {}

    transcript = (transcript or "").strip()
    if not transcript:
        return {}

    params = {}
    api_key = getattr(settings, "TEXT_EXTRACTION_API_KEY", "") or ""
    if api_key:
        params["key"] = api_key

    try:
        response = requests.post(
            url,
            params=params,
            json={
                "contents": [{"parts": [{"text": build_prompt(spec, transcript)}]}],
                "generationConfig": {"responseMimeType": "application/json"},
            },
            timeout=float(getattr(settings, "TEXT_EXTRACTION_TIMEOUT", 15)),
        )
        response.raise_for_status()
        text = _response_text(response.json())
        raw = json.loads(text) if text else {}
    except (requests.RequestException, ValueError) as e:
        # ValueError covers both response.json() and json.loads failures
        logger.warning("text extraction failed for %s: %s", spec.code, e)
        return {}

    return clean_suggestion(spec, raw)

"""Batch comparison API: alignment, WER/CER and statistics."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from reciter.config import settings
from reciter.services.metrics import compare, summarize

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/align")
async def align_texts(request: Request):
    """Compare a transcript with its reference text.

    Body: {reference: str, hypothesis: str, case_sensitive?: bool, tokenizer?: str}.
    Returns: {reference, hypothesis, alignment: [...], metrics, cer, stats, summary}
    """
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse({"error": "Body must be JSON"}, status_code=400)
    if not isinstance(body, dict):
        return JSONResponse({"error": "Body must be a JSON object"}, status_code=400)

    reference = body.get("reference")
    hypothesis = body.get("hypothesis")
    if not isinstance(reference, str) or not isinstance(hypothesis, str):
        logger.warning("Rejected /align request without reference/hypothesis text")
        return JSONResponse(
            {"error": "Both 'reference' and 'hypothesis' must be strings"},
            status_code=400,
        )

    case_sensitive = body.get("case_sensitive", settings.case_sensitive)
    if not isinstance(case_sensitive, bool):
        return JSONResponse({"error": "'case_sensitive' must be a boolean"}, status_code=400)
    tokenizer = body.get("tokenizer", settings.batch_tokenizer)
    if not isinstance(tokenizer, str):
        return JSONResponse({"error": "'tokenizer' must be a name"}, status_code=400)

    try:
        result = compare(
            reference,
            hypothesis,
            case_sensitive=case_sensitive,
            tokenizer=tokenizer,
        )
    except ValueError as e:
        logger.warning("Rejected /align request: %s", e)
        return JSONResponse({"error": str(e)}, status_code=400)

    payload = result.to_dict()
    payload["summary"] = summarize(result.alignment)
    return JSONResponse(payload)

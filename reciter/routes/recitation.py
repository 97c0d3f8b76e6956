"""Recitation APIs: one-shot matching and a live WebSocket practice session."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from reciter.config import settings
from reciter.services.matcher import match_recitation, split_transcript
from reciter.services.normalizer import get_locale_fold
from reciter.services.session import RecitationSession

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse_threshold(value) -> float | None:
    """Threshold from a request body, or None when it is unusable."""
    if value is None:
        return settings.similarity_threshold
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not 0.0 <= value <= 1.0:
        return None
    return float(value)


# ---- One-shot matching ----


@router.post("/recitation/match")
async def match_transcript(request: Request):
    """Match a transcript against the reference text in one call.

    Body: {reference: str, transcript?: str, tokens?: [str], threshold?: float,
           use_locale_normalization?: bool}.
    Returns: {matches, revealed_token_mask, unrevealed_original,
              unmatched_transcript_indices, final_original_pointer}
    """
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse({"error": "Body must be JSON"}, status_code=400)
    if not isinstance(body, dict):
        return JSONResponse({"error": "Body must be a JSON object"}, status_code=400)

    reference = body.get("reference")
    if not isinstance(reference, str):
        return JSONResponse({"error": "'reference' must be a string"}, status_code=400)

    tokens = body.get("tokens")
    transcript = body.get("transcript")
    if tokens is not None:
        if not isinstance(tokens, list) or not all(isinstance(t, str) for t in tokens):
            return JSONResponse(
                {"error": "'tokens' must be a list of strings"}, status_code=400
            )
    elif isinstance(transcript, str):
        tokens = split_transcript(transcript)
    else:
        logger.warning("Rejected /recitation/match request without transcript")
        return JSONResponse(
            {"error": "Provide 'transcript' (string) or 'tokens' (list)"},
            status_code=400,
        )

    threshold = _parse_threshold(body.get("threshold"))
    if threshold is None:
        return JSONResponse(
            {"error": "'threshold' must be a number between 0 and 1"}, status_code=400
        )

    use_locale_normalization = body.get(
        "use_locale_normalization", settings.use_locale_normalization
    )
    if not isinstance(use_locale_normalization, bool):
        return JSONResponse(
            {"error": "'use_locale_normalization' must be a boolean"}, status_code=400
        )

    result = match_recitation(
        reference,
        tokens,
        similarity_threshold=threshold,
        use_locale_normalization=use_locale_normalization,
        locale_fold=get_locale_fold(settings.locale),
    )
    return JSONResponse(result.to_dict())


# ---- WebSocket for a live recitation session ----


@router.websocket("/ws/recitation")
async def recitation_ws(websocket: WebSocket):
    """
    Live practice: the browser streams its running ASR transcript and the
    server answers with the merged reveal state after every update.

    Client sends JSON text frames:
      - {"type": "start", "reference": str, "threshold"?: float,
         "use_locale_normalization"?: bool}
      - {"type": "transcript", "text": str}   (everything spoken so far)
      - {"type": "skip"} / {"type": "reset"} / {"type": "stop"}

    Server sends:
      - {"type": "progress", ...session progress..., "matches": [...]}
      - {"type": "complete", "message": ...}
      - {"type": "error", "message": ...}
    """
    await websocket.accept()
    session: RecitationSession | None = None

    async def send_progress(extra: dict | None = None) -> None:
        payload = {"type": "progress", **session.progress()}
        if extra:
            payload.update(extra)
        await websocket.send_json(payload)

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                msg = json.loads(raw)
            except ValueError:
                await websocket.send_json({"type": "error", "message": "Invalid JSON"})
                continue
            if not isinstance(msg, dict):
                await websocket.send_json({"type": "error", "message": "Invalid message"})
                continue

            msg_type = msg.get("type")

            if msg_type == "start":
                reference = msg.get("reference")
                threshold = _parse_threshold(msg.get("threshold"))
                use_locale_normalization = msg.get("use_locale_normalization")
                if (
                    not isinstance(reference, str)
                    or threshold is None
                    or use_locale_normalization is not None
                    and not isinstance(use_locale_normalization, bool)
                ):
                    await websocket.send_json({
                        "type": "error",
                        "message": "start needs a 'reference' string, a valid 'threshold'"
                        " and a boolean 'use_locale_normalization'",
                    })
                    continue
                session = RecitationSession(
                    reference,
                    similarity_threshold=threshold,
                    use_locale_normalization=use_locale_normalization,
                )
                logger.info(
                    "Recitation session started: %d words, threshold %.2f",
                    session.total_count,
                    threshold,
                )
                await send_progress()
                continue

            if msg_type == "stop":
                break

            if session is None:
                await websocket.send_json({
                    "type": "error",
                    "message": "Send a start message first",
                })
                continue

            if msg_type == "transcript":
                text = msg.get("text")
                if not isinstance(text, str):
                    await websocket.send_json({
                        "type": "error",
                        "message": "transcript needs a 'text' string",
                    })
                    continue
                was_complete = session.is_complete
                result = session.update(text)
                await send_progress({
                    "matches": [m.to_dict() for m in result.matches],
                    "pointer": result.final_original_pointer,
                })
                if session.is_complete and not was_complete:
                    await websocket.send_json({
                        "type": "complete",
                        "message": "Well done! Every word is revealed.",
                    })

            elif msg_type == "skip":
                skipped = session.skip_word()
                if skipped is None:
                    await websocket.send_json({
                        "type": "error",
                        "message": "Skipping is not available yet",
                    })
                    continue
                await send_progress({"skipped": skipped})

            elif msg_type == "reset":
                session.reset()
                await send_progress()

            else:
                await websocket.send_json({
                    "type": "error",
                    "message": f"Unknown message type {msg_type!r}",
                })

    except WebSocketDisconnect:
        logger.info("Recitation client disconnected")
        return

    if session is not None:
        logger.info(
            "Recitation session ended: %d/%d words revealed",
            session.revealed_count,
            session.total_count,
        )
    await websocket.close()

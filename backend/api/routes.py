import json
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from schemas import ChatMessage, ChatRequest, ChatResponse, FallbackResponse, UsedLiveData
from services.heuristics import basic_heuristic_answer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

FALLBACK_CONFIDENCE = 0.7
_INVALID_BODY = {"error": "Invalid request body: missing messages"}


def _latest_question(messages: list[ChatMessage]) -> str:
    """Latest user-authored message, else the last message of any role."""
    for m in reversed(messages):
        if m.role == "user":
            return m.text
    return messages[-1].text if messages else ""


async def _parse_body(request: Request) -> ChatRequest | None:
    try:
        payload = await request.json()
        # Some clients double-encode the body as a JSON string
        if isinstance(payload, str):
            payload = json.loads(payload)
        return ChatRequest.model_validate(payload)
    except (ValueError, ValidationError) as exc:
        logger.info("Rejected /api/chat body: %s", exc)
        return None


# ===========================================================================
# CHAT
# ===========================================================================

@router.post("/chat")
async def chat(request: Request):
    body = await _parse_body(request)
    if body is None:
        return JSONResponse(status_code=400, content=_INVALID_BODY)

    try:
        user_id = body.user_id or "anonymous"
        question = _latest_question(body.messages)

        chat_graph = request.app.state.chat_graph
        final_state = await chat_graph.ainvoke(
            {"user_id": user_id, "question": question, "messages": body.messages}
        )

        answer = final_state["answer"]
        market = final_state["market"]
        response = ChatResponse(
            text=answer.text,
            confidence=answer.confidence,
            sources=answer.sources,
            used_search=answer.used_search,
            used_live_data=UsedLiveData(
                fx_symbols=list(market["fx_rates"]),
                stocks=list(market["stock_quotes"]),
                crypto=list(market["crypto_prices"]),
                transaction_count=len(final_state.get("transactions") or []),
            ),
        )
    except Exception:
        logger.exception("Aurora /api/chat failed; answering with heuristic fallback")
        fallback = basic_heuristic_answer("", confidence=FALLBACK_CONFIDENCE)
        envelope = FallbackResponse(
            text=fallback.text,
            confidence=fallback.confidence,
            sources=fallback.sources,
            used_search=fallback.used_search,
        )
        return JSONResponse(content=envelope.model_dump(by_alias=True))

    return JSONResponse(content=response.model_dump(by_alias=True))


@router.api_route("/chat", methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"], include_in_schema=False)
async def chat_method_not_allowed():
    return JSONResponse(
        status_code=405,
        content={"error": "Method Not Allowed"},
        headers={"Allow": "POST"},
    )

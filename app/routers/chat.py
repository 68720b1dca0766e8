"""
/api/chat endpoints: one message in, five concurrent steps out.
- POST /api/chat/stream: Server-Sent Events, one `data: {json}` line per step event.
- POST /api/chat: the same steps collected into one JSON object.
- POST /api/chat/onboarding: a short acknowledgement for one onboarding answer.
"""

import json
import logging

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from app import factory
from app.schemas import ChatRequest, OnboardingRequest

router = APIRouter(tags=["chat"])
logger = logging.getLogger(__name__)


@router.post("/chat/stream")
async def chat_stream(req: ChatRequest):
    pipe = factory.build_chat()
    responder = pipe.responder(req.query, req.profile)

    async def event_generator():
        try:
            async for event in responder.stream():
                yield f"data: {json.dumps(event, default=str)}\n\n"
        except Exception as exc:
            logger.warning("chat stream failed: %r", exc)
            if not responder.closed:
                yield f"data: {json.dumps({'type': 'error', 'message': str(exc)})}\n\n"

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.post("/chat")
async def chat(req: ChatRequest):
    return await factory.build_chat().respond(req.query, req.profile)


@router.post("/chat/onboarding")
async def onboarding(req: OnboardingRequest):
    reply = await factory.build_chat().onboarding_reply(req.question, req.answer, req.step, req.total_steps)
    return {"response": reply}

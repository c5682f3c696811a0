"""Voice command endpoint."""

from fastapi import APIRouter, Form
from fastapi.responses import JSONResponse

from ..runtime import get_runtime

router = APIRouter(tags=["voice"])


@router.post("/voice")
async def voice_command(transcript: str = Form(...)):
    """Process one transcript and run the resulting command on the rig."""
    transcript = transcript.strip()
    if not transcript:
        return JSONResponse(status_code=400, content={"error": "Transcript is empty", "action": "ERROR_EMPTY_TRANSCRIPT"})

    runtime = get_runtime()
    llm = runtime.selector.active_client()
    try:
        return await runtime.build_turn(llm).run(transcript)
    finally:
        await llm.close()

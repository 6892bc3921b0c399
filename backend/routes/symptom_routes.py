import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from auth import get_current_user
from models.symptom import SymptomLogCreate
from services.badge_service import BadgeService
from services.report_service import generate_history_pdf, report_filename
from services.symptom_service import SymptomService
from services.streak_service import resolve_timezone

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/symptoms", tags=["Symptoms"])


@router.get("")
async def list_symptoms(user_id: str = Depends(get_current_user)):
    try:
        return await SymptomService.list_symptoms()
    except Exception as e:
        logger.error(f"Error loading symptoms: {e}")
        raise HTTPException(status_code=500, detail="Failed to load symptoms")


@router.post("/logs")
async def log_symptoms(log_data: SymptomLogCreate, tz: Optional[str] = None, user_id: str = Depends(get_current_user)):
    try:
        resolve_timezone(tz)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        created = await SymptomService.create_log(user_id, log_data)
    except Exception as e:
        logger.error(f"Error logging symptoms for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to log symptoms")

    # Badge checks are best effort and never fail the write
    new_badges = await BadgeService.evaluate(user_id, tz)
    return {"status": "success", "data": created, "new_badges": new_badges}


@router.get("/logs")
async def symptom_history(user_id: str = Depends(get_current_user)):
    try:
        return await SymptomService.recent_history(user_id)
    except Exception as e:
        logger.error(f"Error loading symptom history for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load symptom history")


@router.get("/logs/{log_id}/chat-prompt")
async def symptom_chat_prompt(log_id: str, user_id: str = Depends(get_current_user)):
    """Draft question about one log, for the client to hand to the chat view."""
    try:
        prompt = await SymptomService.chat_prompt_for(user_id, log_id)
    except Exception as e:
        logger.error(f"Error building chat prompt for log {log_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load symptom log")
    if prompt is None:
        raise HTTPException(status_code=404, detail="Log not found")
    return {"message": prompt}


@router.get("/report.pdf")
async def export_history_pdf(tz: Optional[str] = None, user_id: str = Depends(get_current_user)):
    try:
        zone = resolve_timezone(tz)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        logs = await SymptomService.recent_history(user_id)
    except Exception as e:
        logger.error(f"Error loading symptom history for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load symptom history")
    if not logs:
        raise HTTPException(status_code=404, detail="No symptom logs yet")

    now = datetime.now(zone)
    pdf = generate_history_pdf(logs, generated_on=now, tz=zone)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{report_filename(now)}"'},
    )

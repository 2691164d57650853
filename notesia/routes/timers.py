from __future__ import annotations

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ..domain.time_entry import EMPTY_DURATION, MODES, MODE_RAW, accumulate, accumulate_raw
from ..errors import StoreError
from ..logs import LogContext
from ..services.config_svc import get_config
from ..services.timer_svc import open_default_store

router = APIRouter()


class TimerCreate(BaseModel):
    name: str | None = ""
    duration: str | None = EMPTY_DURATION


class KeypadPress(BaseModel):
    current: str | None = None
    digit: str
    mode: str | None = None


@router.get("/api/timers")
def api_timers_list():
    try:
        items = open_default_store().get_all_items()
        return {"total": len(items), "items": [it.to_dict() for it in items]}
    except StoreError as e:
        LogContext("TIMER_LIST").write_safe("ERROR", str(e))
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/api/timers", status_code=201)
def api_timers_create(body: TimerCreate):
    log = LogContext("TIMER_CREATE")
    log.set_payload(body.model_dump())
    try:
        record = open_default_store().add_item(body.name, body.duration)
    except StoreError as e:
        log.write_safe("ERROR", str(e))
        raise HTTPException(status_code=500, detail=str(e))
    # row is already committed; audit failures are logged, not raised
    log.set_record(record.to_dict())
    log.write_safe("OK")
    return record.to_dict()


@router.post("/api/keypad/press")
def api_keypad_press(body: KeypadPress):
    mode = (body.mode or get_config()["keypad_mode"]).lower()
    if mode not in MODES:
        raise HTTPException(status_code=400, detail=f"unknown keypad mode: {mode}")
    try:
        if mode == MODE_RAW:
            value = accumulate_raw(body.current or "", body.digit)
        else:
            value = accumulate(body.current or EMPTY_DURATION, body.digit)
        return {"value": value, "mode": mode}
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))

"""Debug clock override: moves the reference date for every rule at once."""

from fastapi import APIRouter, Depends, HTTPException, status

from backend.app.core.settings import get_settings
from backend.app.core.time import OverridableClock, get_clock
from backend.app.schemas.debug import ClockOverride, ClockRead

router = APIRouter(prefix="/debug", tags=["debug"])


def require_debug_clock():
    if not get_settings().debug_clock_enabled:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")


def _read(clock: OverridableClock) -> ClockRead:
    return ClockRead(today=clock.today(), override=clock.override)


@router.get("/clock", response_model=ClockRead, dependencies=[Depends(require_debug_clock)])
async def read_clock(clock: OverridableClock = Depends(get_clock)):
    return _read(clock)


@router.put("/clock", response_model=ClockRead, dependencies=[Depends(require_debug_clock)])
async def set_clock_override(payload: ClockOverride, clock: OverridableClock = Depends(get_clock)):
    clock.set_override(payload.date)
    return _read(clock)


@router.delete("/clock", response_model=ClockRead, dependencies=[Depends(require_debug_clock)])
async def clear_clock_override(clock: OverridableClock = Depends(get_clock)):
    clock.clear_override()
    return _read(clock)

from __future__ import annotations

from fastapi import APIRouter

from fightnight.services.scheduler import scheduler

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    job = scheduler.get_job("hourly_notify") if scheduler.running else None
    return {
        "status": "ok",
        "scheduler": "running" if scheduler.running else "stopped",
        "next_tick": job.next_run_time.isoformat() if job and job.next_run_time else None,
    }

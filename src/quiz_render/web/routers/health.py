from fastapi import APIRouter

from quiz_render.web.routers.renders import QueueDep

router = APIRouter(
    prefix="/health",
    tags=["health"],
)


@router.get("")
async def health(queue: QueueDep) -> dict:
    """Report worker liveness and how many jobs are waiting or rendering."""
    counts = queue.counts()
    return {
        "status": "ok" if queue.serializer.running else "stopped",
        "queued": counts.get("queued", 0),
        "inProgress": counts.get("in-progress", 0),
    }


__all__ = ["router"]

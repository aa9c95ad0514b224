import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI
from pydantic import BaseModel, Field

from core.hit_recorder import HitRecorder

logger = logging.getLogger(__name__)


class ObservedCall(BaseModel):
    method: str
    url: str
    body: Optional[Any] = None
    query: List[str] = Field(default_factory=list)


def create_recorder_app(recorder: HitRecorder) -> FastAPI:
    """
    Creates a collector service that test harnesses report observed calls to.
    """
    app = FastAPI(title="REST Coverage Recorder")
    logger.info(f"Recorder app tracking {len(recorder.coverage.endpoints)} paths")

    @app.post("/recorder/calls")
    async def record_call(call: ObservedCall) -> Dict[str, Any]:
        endpoint = recorder.record_call(call.method, call.url, body=call.body, query=call.query)
        if endpoint is None:
            return {"matched": False}
        return {"matched": True, "method": endpoint.method, "path": endpoint.path}

    @app.get("/recorder/coverage")
    async def get_coverage() -> Dict[str, Any]:
        report = recorder.snapshot().to_dict()
        report["unmatchedCalls"] = recorder.unmatched_calls
        return report

    @app.get("/health")
    async def health() -> Dict[str, str]:
        return {"status": "ok"}

    return app

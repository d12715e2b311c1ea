import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from news_getter.modules.job.service import job_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("")
async def run_job(request: Request) -> JSONResponse:
    body = await request.body()
    logger.info("Received request body: %s", body.decode("utf-8", errors="replace"))

    result = await job_service.run(body)
    return JSONResponse(
        status_code=result.status.http_status,
        content=result.model_dump(mode="json"),
    )

"""AWS Lambda entry point.

Accepts either an API Gateway proxy event, whose ``body`` holds the job as a
JSON string, or a direct invocation whose event is the job itself.
"""
import asyncio
import base64
import binascii
import json
import logging

from news_getter.config.settings import settings
from news_getter.modules.job.schemas import JobResult, JobStatus
from news_getter.modules.job.service import job_service

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _response(result: JobResult) -> dict:
    return {
        "statusCode": result.status.http_status,
        "body": json.dumps(result.model_dump(mode="json")),
    }


def lambda_handler(event, context=None):
    if isinstance(event, dict) and "body" in event:
        payload = event["body"] or ""
        if event.get("isBase64Encoded"):
            try:
                payload = base64.b64decode(payload, validate=True)
            except (binascii.Error, ValueError) as exc:
                logger.warning("Unable to decode base64 request body: %s", exc)
                return _response(JobResult(
                    status=JobStatus.CLIENT_ERROR,
                    message="Request body is not valid base64",
                ))
    else:
        payload = event
    logger.info("Received request body: %s", payload)

    return _response(asyncio.run(job_service.run(payload)))

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import aio_pika
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from config import LOG_LEVEL, PREVIEW_JOBS_QUEUE, PREVIEW_RESULTS_QUEUE, RABBITMQ_URL
from models.preview import MatchesResponse, PreviewJob, PreviewResponse
from services.previews import (
    extract_all_previews,
    extract_all_previews_async,
    extract_first_preview,
    extract_first_preview_async,
    fetch_preview,
    fetch_preview_async,
)

logging.basicConfig(level=LOG_LEVEL.upper())
logger = logging.getLogger("preview-service")


async def build_job_result(job: PreviewJob) -> dict:
    """
    Turn a preview job into the payload published on the results queue.

    A job carries either a ``url`` to preview directly or a ``text`` to scan;
    ``first`` limits a text job to the left-most successful match.
    """
    result = {"jobId": job.job_id}
    if job.url is not None:
        preview = await fetch_preview_async(job.url)
        result["preview"] = preview.model_dump(mode="json") if preview else None
    elif job.first:
        match = await extract_first_preview_async(job.text)
        result["matches"] = [match.model_dump(mode="json")] if match else []
    else:
        matches = await extract_all_previews_async(job.text)
        result["matches"] = [match.model_dump(mode="json") for match in matches]
    result["fetchedAt"] = datetime.now(timezone.utc).isoformat()
    return result


def parse_job(body: bytes) -> Optional[PreviewJob]:
    """Validate a raw queue message. Malformed jobs are logged and give None."""
    try:
        return PreviewJob.model_validate_json(body)
    except ValidationError as exc:
        logger.warning(f"Skipping malformed preview job: {exc}")
        return None


async def consume_preview_jobs():
    retry_interval = 2.0
    while True:
        try:
            connection = await aio_pika.connect_robust(RABBITMQ_URL)
            async with connection:
                channel = await connection.channel()
                jobs_queue = await channel.declare_queue(PREVIEW_JOBS_QUEUE, durable=True)
                await channel.declare_queue(PREVIEW_RESULTS_QUEUE, durable=True)

                logger.info("Connected to RabbitMQ, consuming preview jobs")

                async with jobs_queue.iterator() as queue_iter:
                    async for message in queue_iter:
                        async with message.process():
                            job = parse_job(message.body)
                            if job is None:
                                continue
                            result = await build_job_result(job)

                            await channel.default_exchange.publish(
                                aio_pika.Message(
                                    body=json.dumps(result).encode(),
                                    delivery_mode=aio_pika.DeliveryMode.PERSISTENT,
                                ),
                                routing_key=PREVIEW_RESULTS_QUEUE,
                            )
                            logger.info("Preview result published", extra={"jobId": job.job_id})
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning(f"RabbitMQ consumer error, retrying in {retry_interval}s: {exc}")
            await asyncio.sleep(retry_interval)


@asynccontextmanager
async def lifespan(app: FastAPI):
    task = asyncio.create_task(consume_preview_jobs())
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


app = FastAPI(title="Link Preview Service", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.get("/preview", response_model=PreviewResponse)
def get_preview(url: str = Query(..., description="The URL to build a preview for, scheme optional")):
    if not url.strip():
        raise HTTPException(status_code=400, detail="Invalid URL. Must not be empty.")

    return PreviewResponse(
        url=url,
        preview=fetch_preview(url),
        fetched_at=datetime.now(timezone.utc),
    )


@app.get("/previews", response_model=MatchesResponse)
def get_previews(
    text: str = Query(..., description="Free text to scan for links"),
    first: bool = Query(False, description="Only return the left-most successful preview"),
):
    if first:
        match = extract_first_preview(text)
        matches = [match] if match else []
    else:
        matches = extract_all_previews(text)

    return MatchesResponse(text=text, matches=matches, fetched_at=datetime.now(timezone.utc))


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/ready")
def ready():
    return {"status": "ready"}

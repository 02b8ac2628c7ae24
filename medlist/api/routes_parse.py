# medlist/api/routes_parse.py
import asyncio
import json
import logging
from typing import Any, Awaitable

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError
from starlette.datastructures import UploadFile

from medlist.core.server_config import DISCONNECT_POLL_S, MAX_UPLOAD_BYTES
from medlist.schemas.models import ErrorResponse, MedicationList, ParseImageRequest
from medlist.services.errors import ExtractionError, InvalidInputError, UpstreamError
from medlist.services.image_input import ImagePayload, normalize
from medlist.services.llm.extraction import parse_medication_image
from medlist.services.vision import VisionClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["parse"])

UPLOAD_FIELD = "image"
CLIENT_CLOSED_REQUEST = 499


class ClientDisconnected(Exception):
    pass


def get_vision_client(request: Request) -> VisionClient:
    return request.app.state.vision_client


def _too_large() -> HTTPException:
    return HTTPException(status_code=413, detail=f"Payload too large (limit {MAX_UPLOAD_BYTES} bytes)")


async def _read_image_input(request: Request) -> ImagePayload:
    """Form upload (field 'image' or 'imageData') or JSON {imageData}; anything else counts as no image."""
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > MAX_UPLOAD_BYTES:
        raise _too_large()

    content_type = request.headers.get("content-type", "").lower()

    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form(max_part_size=MAX_UPLOAD_BYTES)
        upload = form.get(UPLOAD_FIELD)
        image_data = form.get("imageData")
        data, upload_type = b"", None
        if isinstance(upload, UploadFile):
            data = await upload.read()
            upload_type = upload.content_type
            if len(data) > MAX_UPLOAD_BYTES:
                raise _too_large()
        return normalize(
            upload=data,
            content_type=upload_type,
            image_data=image_data if isinstance(image_data, str) else None,
        )

    if content_type.startswith("application/json"):
        body = await request.body()
        if len(body) > MAX_UPLOAD_BYTES:
            raise _too_large()
        try:
            req = ParseImageRequest.model_validate(json.loads(body or b"{}"))
        except (ValueError, RecursionError, ValidationError):
            raise HTTPException(status_code=400, detail="Invalid JSON body")
        return normalize(image_data=req.image_data)

    return normalize()


async def _run_until_disconnect(request: Request, work: Awaitable[Any]) -> Any:
    """Await `work`, cancelling it if the client goes away first."""
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_S)
            if done:
                return task.result()
            if await request.is_disconnected():
                task.cancel()
                raise ClientDisconnected()
    finally:
        if not task.done():
            task.cancel()


@router.post(
    "/parse",
    response_model=MedicationList,
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def parse_medications(request: Request, client: VisionClient = Depends(get_vision_client)):
    try:
        payload = await _read_image_input(request)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        return await _run_until_disconnect(request, parse_medication_image(payload, client))
    except ClientDisconnected:
        logger.info("Client disconnected, medication extraction cancelled")
        return Response(status_code=CLIENT_CLOSED_REQUEST)
    except (UpstreamError, ExtractionError) as e:
        logger.exception("Error parsing medications")
        err = ErrorResponse(error="Failed to parse medications", details=str(e))
        return JSONResponse(status_code=500, content=err.model_dump())

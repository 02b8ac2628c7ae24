# medlist/services/llm/extraction.py
import logging

from medlist.schemas.models import MedicationList
from medlist.services.image_input import ImagePayload
from medlist.services.llm.extraction_prompt import EXTRACT_MEDS_PROMPT
from medlist.services.llm.recovery import recover
from medlist.services.vision import VisionClient

logger = logging.getLogger(__name__)


async def parse_medication_image(payload: ImagePayload, client: VisionClient) -> MedicationList:
    """Ask the vision model for the medication list on the image and recover it from the reply."""
    logger.info(
        "Extracting medications via %s (media_type=%s, bytes=%d)",
        client.name, payload.media_type, payload.size,
    )
    raw = await client.complete(payload, EXTRACT_MEDS_PROMPT)
    result = recover(raw)
    logger.info("Extracted %d medication(s)", len(result.medications))
    return result

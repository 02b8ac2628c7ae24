from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class Medication(BaseModel):
    medication_name: str = Field(..., description="Full name incl. strength and form, e.g. 'Lisinopril 10 MG Oral Tablet'")
    frequency: str = Field(..., description="How often taken, e.g. 'daily', 'every 8 hours', 'at bedtime'")
    instructions: str = Field(..., description="Full SIG / directions as written")
    is_prn: bool = Field(..., description="True for as-needed (PRN) medicines")
    indication: str = Field(default="", description="Diagnosis or reason if listed")


class MedicationList(BaseModel):
    medications: List[Medication]


class ParseImageRequest(BaseModel):
    # camelCase on the wire, same as the browser paste payload
    model_config = ConfigDict(populate_by_name=True)

    image_data: Optional[str] = Field(default=None, alias="imageData")


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None

# medlist/services/llm/extraction_schema.py

MEDICATION_LIST_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "medications": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "properties": {
                    "medication_name": {"type": "string"},
                    "frequency": {"type": "string"},
                    "instructions": {"type": "string"},
                    "is_prn": {"type": "boolean"},
                    "indication": {"type": "string"},
                },
                "required": ["medication_name", "frequency", "instructions", "is_prn", "indication"],
            },
        }
    },
    "required": ["medications"],
}

# medlist/services/llm/extraction_sanitize.py
from typing import Any, Dict

_TEXT_FIELDS = ("medication_name", "frequency", "instructions", "indication")


def sanitize_medication_list(raw: Any) -> Any:
    """
    Light cleanup before schema validation:
    - string fields are stripped
    - missing/null indication becomes ""
    Anything that is not the expected shape is returned untouched so the
    validator can reject it. Order and duplicates are preserved.
    """
    if not isinstance(raw, dict) or not isinstance(raw.get("medications"), list):
        return raw

    cleaned = []
    for m in raw["medications"]:
        if not isinstance(m, dict):
            cleaned.append(m)
            continue
        med: Dict[str, Any] = dict(m)
        if med.get("indication") is None:
            med["indication"] = ""
        for key in _TEXT_FIELDS:
            if isinstance(med.get(key), str):
                med[key] = med[key].strip()
        cleaned.append(med)

    return {**raw, "medications": cleaned}

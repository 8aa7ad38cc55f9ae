"""Schema definition for the image label reporting tool."""

from typing import Any, Dict

FUNCTION_NAME = "report_image_labels"

FUNCTION_DEFINITION: Dict[str, Any] = {
    "type": "function",
    "name": FUNCTION_NAME,
    "description": (
        "Return the objects and attributes visible in the image, each with a confidence score."
    ),
    "parameters": {
        "type": "object",
        "properties": {
            "labels": {
                "type": "array",
                "description": "Labels ordered from most to least confident.",
                "items": {
                    "type": "object",
                    "properties": {
                        "name": {
                            "type": "string",
                            "description": "A short Title Case noun or attribute, e.g. 'Backpack' or 'Blue'.",
                        },
                        "confidence": {
                            "type": "number",
                            "description": "Confidence from 0 to 100 that the label applies.",
                        },
                    },
                    "required": ["name", "confidence"],
                    "additionalProperties": False,
                },
            },
        },
        "required": ["labels"],
        "additionalProperties": False,
    },
    "strict": True,
}

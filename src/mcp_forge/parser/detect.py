"""Auto-detect the serialization of an API description and load it."""

import json
from typing import Any

import yaml


def detect_format(text: str) -> str:
    """Detect whether a document is JSON or YAML.

    Returns: 'json' or 'yaml'.
    """
    return "json" if text.lstrip().startswith("{") else "yaml"


def load_document(text: str) -> Any:
    """Parse raw text into a document tree.

    Raises ValueError when the text is neither valid JSON nor valid YAML
    (whichever ``detect_format`` picked).
    """
    if detect_format(text) == "json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"invalid JSON: {e}") from e

    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"invalid YAML: {e}") from e

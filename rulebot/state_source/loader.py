"""
Definition loaders — decode a state graph document into a StateDefinition.

Supported formats:
  .json  {"invalid_answers": [...], "states": [{"id", "messages", "keywords"}]}
  .xml   <bot><invalid>..</invalid><state id="..">..</state></bot>
"""

import json
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Union

from pydantic import ValidationError

from rulebot.models.state import StateDefinition
from rulebot.state_source.store import InvalidDefinition

KEYWORD_ATTRIBUTES = ("target", "className", "arg", "variable", "learn")


def load_definition(path: Union[str, Path]) -> StateDefinition:
    """Load a definition file, picking the decoder from its suffix."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in (".json", ".xml"):
        raise InvalidDefinition(f"Unsupported definition format: {path.name}")

    data = path.read_bytes()

    if suffix == ".json":
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidDefinition(f"Definition {path.name} is not valid UTF-8: {e}") from e
        return parse_json(text)
    # XML carries its own encoding declaration
    return parse_xml(data)


def parse_json(text: str) -> StateDefinition:
    try:
        return StateDefinition.model_validate_json(text)
    except ValidationError as e:
        raise InvalidDefinition(f"Invalid definition document: {e}") from e


def parse_xml(text: Union[str, bytes]) -> StateDefinition:
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise InvalidDefinition(f"Malformed XML definition: {e}") from e

    invalid: List[str] = []
    for block in root.findall("invalid"):
        invalid.extend((m.text or "").strip() for m in block.findall("message"))

    states = []
    for node in root.findall("state"):
        keywords = []
        for kw in node.iter("keyword"):
            entry = {name: kw.get(name, "") for name in KEYWORD_ATTRIBUTES}
            entry["keyword"] = (kw.text or "").strip()
            entry["points"] = kw.get("points") or 0
            keywords.append(entry)
        states.append({
            "id": node.get("id", ""),
            "messages": [(m.text or "").strip() for m in node.findall("message")],
            "keywords": keywords,
        })

    try:
        return StateDefinition.model_validate({
            "states": states,
            "invalid_answers": [a for a in invalid if a],
        })
    except ValidationError as e:
        raise InvalidDefinition(f"Invalid definition document: {e}") from e


def dump_json(definition: StateDefinition) -> str:
    """Serialize a definition back to the JSON document format."""
    return json.dumps(
        definition.model_dump(mode="json", by_alias=True), indent=2
    )

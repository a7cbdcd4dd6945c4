import json
import re
from typing import Any, Dict, Mapping

from core.errors import MalformedResponse

_PLACEHOLDER = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


def stringify(value: Any) -> str:
    """Strings go in verbatim; everything else as its JSON text."""
    if isinstance(value, str):
        return value
    if hasattr(value, "model_dump"):
        value = value.model_dump(mode="json", by_alias=True)
    return json.dumps(value, ensure_ascii=False)


def render_prompt(template: str, variables: Mapping[str, Any]) -> str:
    """
    Replace every {name} placeholder that has a matching variable.
    Unknown names and literal JSON braces in the template are left untouched.
    """

    def _replace(match: re.Match) -> str:
        name = match.group(1)
        if name not in variables:
            return match.group(0)
        return stringify(variables[name])

    return _PLACEHOLDER.sub(_replace, template)


def _reject_constant(name: str):
    # NaN, Infinity and -Infinity are accepted by json.loads but are not JSON
    raise MalformedResponse(f"Response contains the non-JSON constant {name}.")


def parse_json_object(raw: str) -> Dict[str, Any]:
    """
    Strictly parse a model response as a JSON object.
    No repair is attempted: prose, markdown fences or a top-level array are errors.
    """
    if raw is None or not raw.strip():
        raise MalformedResponse("Empty response from model.", raw or "")

    try:
        data = json.loads(raw, parse_constant=_reject_constant)
    except json.JSONDecodeError as err:
        raise MalformedResponse(f"Response is not valid JSON: {err.msg} (line {err.lineno}, column {err.colno})", raw) from err

    if not isinstance(data, dict):
        raise MalformedResponse(f"Expected a JSON object, got {type(data).__name__}.", raw)
    return data

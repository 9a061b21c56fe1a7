import json

from flask import request

from quizgen.errors import InvalidInputError


def get_json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInputError("Request body must be a JSON object.")
    return data


def coerce_int(value, name, required=True):
    """Accept ints and integer strings ("2"), reject everything else."""
    if value is None or value == "":
        if required:
            raise InvalidInputError(f"{name} is required.")
        return None
    if isinstance(value, bool):
        raise InvalidInputError(f"{name} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise InvalidInputError(f"{name} must be an integer.")


def sse_event(payload):
    return f"data: {json.dumps(payload)}\n\n"


SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
}

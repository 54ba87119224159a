"""Best-effort extraction of the program's JSON result from stdout."""

from __future__ import annotations

import json
import re
from typing import Any

# Greedy: from the first "{" to the last "}" in the whole output.
_JSON_SPAN = re.compile(r"\{[\s\S]*\}")


def extract_json_result(stdout: str) -> Any | None:
    """Parse the first brace-delimited span of ``stdout`` as JSON.

    Returns None when there is no span or it does not parse. Programs are
    told to print a single ``JSON.stringify(...)`` line, so log lines
    around it are fine but a second object later in the output makes the
    span unparseable.
    """
    match = _JSON_SPAN.search(stdout)
    if not match:
        return None
    try:
        return json.loads(match.group(0))
    except (ValueError, RecursionError):
        # JSONDecodeError, oversized integers and pathological nesting alike
        return None

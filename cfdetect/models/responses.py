"""JSON response builders for cfdetect.

  PrettyJSONResponse:
      Renders with 2-space indentation. Used for every /detect success body.

  build_report_response():
      HTTP 200 carrying an InferenceReport and the X-Inference-ID header.
"""

from __future__ import annotations

import json
from typing import Any

from fastapi.responses import JSONResponse

from cfdetect.constants import INFERENCE_ID_HEADER
from cfdetect.models.report import InferenceReport


class PrettyJSONResponse(JSONResponse):
    """JSONResponse rendered with 2-space indentation."""

    def render(self, content: Any) -> bytes:
        return json.dumps(content, ensure_ascii=False, indent=2).encode("utf-8")


def build_report_response(report: InferenceReport, inference_id: str) -> PrettyJSONResponse:
    """Build the HTTP 200 response for a completed inference.

    Args:
        report:       Aggregated verdict for the requested domain.
        inference_id: ULID assigned to this inference; correlates with logs.

    Returns:
        PrettyJSONResponse (``Content-Type: application/json``).
    """
    response = PrettyJSONResponse(status_code=200, content=report.to_dict())
    response.headers[INFERENCE_ID_HEADER] = inference_id
    return response

from __future__ import annotations

from typing import Any

from ..schemas import MutationResponse


def mutation_response(result: Any) -> MutationResponse:
    if result is None:
        return MutationResponse(success=False)
    payload = result.model_dump(mode="json") if hasattr(result, "model_dump") else result
    return MutationResponse(success=True, result=payload)

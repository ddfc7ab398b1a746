"""Waybill merge endpoint and the shared PDF response."""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from ...models.domain import MergeResult
from ...schemas.courier import MergeWaybillsRequest
from ...services import factory
from ...services.waybills import build_sources

router = APIRouter(prefix="/waybills", tags=["waybills"])


def pdf_response(result: MergeResult, source_count: int) -> Response:
    if source_count == 1 or result.warning:
        filename = "waybill.pdf"
    else:
        filename = f"waybills_{len(result.succeeded)}_orders.pdf"
    headers = {
        "Content-Disposition": f'attachment; filename="{filename}"',
        "X-Success-Count": str(len(result.succeeded)),
        "X-Failed-Count": str(len(result.failed)),
    }
    if result.warning:
        headers["X-Warning"] = result.warning
    return Response(content=result.document, media_type="application/pdf", headers=headers)


@router.post("/merge", status_code=status.HTTP_200_OK)
def merge_waybills(payload: MergeWaybillsRequest) -> Response:
    sources = build_sources(urls=payload.waybill_urls)
    result = factory.get_waybill_merger().merge(sources)
    return pdf_response(result, len(sources))

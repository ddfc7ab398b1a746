"""Fetch waybill PDFs and merge them into one printable document."""

from __future__ import annotations

import io
import logging
from typing import Callable, Iterable, Sequence

import httpx
from pypdf import PdfReader, PdfWriter

from ..courier.client import CourierClient
from ...errors import AllWaybillsFailed, TransientIOError, WaybillFetchFailed
from ...models.domain import MergeResult, WaybillSource

logger = logging.getLogger(__name__)

MERGE_FALLBACK_WARNING = "Could not merge PDFs, returning first waybill only"


def build_sources(tracking_numbers: Iterable[str] = (), urls: Iterable[str] = ()) -> list[WaybillSource]:
    """Sources in caller order, tracking numbers first, with blank entries dropped."""
    sources = [WaybillSource(tracking_number=tid.strip()) for tid in tracking_numbers if tid and tid.strip()]
    sources.extend(WaybillSource(url=url.strip()) for url in urls if url and url.strip())
    return sources


def merge_pdfs(documents: Sequence[bytes]) -> bytes:
    """Concatenate the pages of each document, preserving order."""
    writer = PdfWriter()
    for payload in documents:
        reader = PdfReader(io.BytesIO(payload))
        for page in reader.pages:
            writer.add_page(page)
    output = io.BytesIO()
    writer.write(output)
    return output.getvalue()


class WaybillMerger:
    def __init__(
        self,
        http_client: httpx.Client,
        courier_client: CourierClient | None = None,
        token_provider: Callable[[], str] | None = None,
    ) -> None:
        self.http_client = http_client
        self.courier_client = courier_client
        self.token_provider = token_provider

    def _fetch_url(self, url: str) -> bytes | None:
        try:
            response = self.http_client.get(url, follow_redirects=True)
        except httpx.HTTPError as exc:
            logger.warning(f"Error fetching waybill from {url}: {exc}")
            return None
        if not response.is_success:
            logger.warning(f"Failed to fetch waybill from {url}: {response.status_code}")
            return None
        return response.content

    def _issue_token(self) -> str:
        if self.courier_client is None or self.token_provider is None:
            raise RuntimeError("Courier client is required to fetch waybills by tracking number")
        return self.token_provider()

    def _fetch_tracking(self, tracking_number: str, token: str) -> bytes | None:
        try:
            return self.courier_client.fetch_waybill(token, tracking_number)
        except (WaybillFetchFailed, TransientIOError) as exc:
            logger.warning(f"Failed to fetch waybill for {tracking_number}: {exc.message}")
            return None

    def fetch(self, source: WaybillSource, token: str | None = None) -> bytes | None:
        if source.tracking_number:
            payload = self._fetch_tracking(source.tracking_number, token or self._issue_token())
        else:
            payload = self._fetch_url(source.url or "")
        if not payload:
            return None
        return payload

    def merge(self, sources: Sequence[WaybillSource]) -> MergeResult:
        if not sources:
            raise ValueError("No waybill sources provided")

        # One fresh token per batch; token errors propagate instead of failing each source.
        token = self._issue_token() if any(source.tracking_number for source in sources) else None

        documents: list[bytes] = []
        succeeded: list[str] = []
        failed: list[str] = []
        for source in sources:
            payload = self.fetch(source, token)
            if payload is None:
                failed.append(source.identifier)
                continue
            logger.info(f"Fetched waybill {source.identifier}, size {len(payload)} bytes")
            documents.append(payload)
            succeeded.append(source.identifier)

        if not documents:
            raise AllWaybillsFailed(failed)

        if len(sources) == 1:
            return MergeResult(document=documents[0], succeeded=succeeded, failed=failed)

        if failed:
            logger.warning(f"{len(failed)} of {len(sources)} waybills failed to fetch: {failed}")

        try:
            merged = merge_pdfs(documents)
        except Exception as exc:
            logger.error(f"Error merging waybill PDFs: {exc}")
            return MergeResult(
                document=documents[0],
                succeeded=succeeded,
                failed=failed,
                warning=MERGE_FALLBACK_WARNING,
            )
        logger.info(f"Merged {len(documents)} waybills into {len(merged)} bytes")
        return MergeResult(document=merged, succeeded=succeeded, failed=failed)

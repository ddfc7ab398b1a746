from __future__ import annotations

import io

import httpx
import pytest
from pypdf import PdfReader, PdfWriter

from courierdesk.errors import AllWaybillsFailed, AuthenticationError, ConfigurationMissing, WaybillFetchFailed
from courierdesk.models.domain import WaybillSource
from courierdesk.services.waybills import WaybillMerger, build_sources
from courierdesk.services.waybills.merger import MERGE_FALLBACK_WARNING


def _pdf(width: int, pages: int = 1) -> bytes:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=width, height=400)
    output = io.BytesIO()
    writer.write(output)
    return output.getvalue()


def _page_widths(document: bytes) -> list[int]:
    return [round(float(page.mediabox.width)) for page in PdfReader(io.BytesIO(document)).pages]


def _merger(documents: dict[str, bytes]) -> WaybillMerger:
    def handler(request: httpx.Request) -> httpx.Response:
        payload = documents.get(str(request.url))
        if payload is None:
            return httpx.Response(404, text="not found")
        return httpx.Response(200, content=payload)

    return WaybillMerger(httpx.Client(transport=httpx.MockTransport(handler)))


class StubCourier:
    def __init__(self, documents: dict[str, bytes]) -> None:
        self.documents = documents
        self.tokens: list[str] = []

    def fetch_waybill(self, token: str, tracking_number: str) -> bytes:
        self.tokens.append(token)
        if tracking_number not in self.documents:
            raise WaybillFetchFailed(tracking_number)
        return self.documents[tracking_number]


def test_single_source_is_returned_byte_for_byte():
    original = _pdf(200) + b"\n% trailing bytes a merge would drop"
    result = _merger({"https://files.test/a.pdf": original}).merge(build_sources(urls=["https://files.test/a.pdf"]))

    assert result.document == original
    assert result.succeeded == ["https://files.test/a.pdf"]
    assert result.failed == []
    assert result.warning is None


def test_partial_failure_keeps_relative_order_and_reports_failures():
    documents = {
        "https://files.test/a.pdf": _pdf(200),
        "https://files.test/c.pdf": _pdf(300, pages=2),
        "https://files.test/d.pdf": _pdf(400),
    }
    urls = [
        "https://files.test/a.pdf",
        "https://files.test/b.pdf",
        "https://files.test/c.pdf",
        "https://files.test/missing.pdf",
        "https://files.test/d.pdf",
    ]
    result = _merger(documents).merge(build_sources(urls=urls))

    assert _page_widths(result.document) == [200, 300, 300, 400]
    assert result.succeeded == ["https://files.test/a.pdf", "https://files.test/c.pdf", "https://files.test/d.pdf"]
    assert result.failed == ["https://files.test/b.pdf", "https://files.test/missing.pdf"]
    assert result.warning is None


def test_all_sources_failing_lists_every_identifier():
    urls = ["https://files.test/x.pdf", "https://files.test/y.pdf"]
    with pytest.raises(AllWaybillsFailed) as excinfo:
        _merger({}).merge(build_sources(urls=urls))
    assert excinfo.value.failed == urls
    assert excinfo.value.details == {"failed": urls}


def test_empty_source_list_is_rejected():
    with pytest.raises(ValueError):
        _merger({}).merge([])


def test_empty_body_counts_as_failure():
    documents = {"https://files.test/a.pdf": b"", "https://files.test/b.pdf": _pdf(250)}
    result = _merger(documents).merge(build_sources(urls=list(documents)))
    assert result.failed == ["https://files.test/a.pdf"]
    assert _page_widths(result.document) == [250]


def test_unparseable_documents_fall_back_to_first_document():
    documents = {"https://files.test/a.pdf": b"not a pdf", "https://files.test/b.pdf": _pdf(250)}
    result = _merger(documents).merge(build_sources(urls=list(documents)))

    assert result.document == b"not a pdf"
    assert result.warning == MERGE_FALLBACK_WARNING
    assert len(result.succeeded) == 2


def test_tracking_numbers_share_one_fresh_token_per_batch():
    courier = StubCourier({"T1": _pdf(210), "T3": _pdf(230)})
    issued = iter(["token-1", "token-2", "token-3"])
    merger = WaybillMerger(
        httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(500))),
        courier_client=courier,
        token_provider=lambda: next(issued),
    )

    result = merger.merge(build_sources(tracking_numbers=["T1", "T2", "T3"]))

    assert courier.tokens == ["token-1", "token-1", "token-1"]
    assert result.failed == ["T2"]
    assert _page_widths(result.document) == [210, 230]


@pytest.mark.parametrize("error", [ConfigurationMissing("Ninjavan configuration not found"), AuthenticationError("Courier authentication failed")])
def test_token_errors_propagate_instead_of_failing_every_source(error):
    courier = StubCourier({"T1": _pdf(210)})

    def broken_token() -> str:
        raise error

    merger = WaybillMerger(
        httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(500))),
        courier_client=courier,
        token_provider=broken_token,
    )

    with pytest.raises(type(error)):
        merger.merge(build_sources(tracking_numbers=["T1", "T2"]))
    assert courier.tokens == []


def test_url_only_batch_never_issues_a_token():
    calls = []
    documents = {"https://files.test/a.pdf": _pdf(200), "https://files.test/b.pdf": _pdf(220)}

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=documents[str(request.url)])

    merger = WaybillMerger(
        httpx.Client(transport=httpx.MockTransport(handler)),
        courier_client=StubCourier({}),
        token_provider=lambda: calls.append("token") or "token",
    )

    result = merger.merge(build_sources(urls=list(documents)))

    assert calls == []
    assert _page_widths(result.document) == [200, 220]


def test_mixed_sources_keep_caller_order():
    courier = StubCourier({"T1": _pdf(210)})

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=_pdf(250))

    merger = WaybillMerger(
        httpx.Client(transport=httpx.MockTransport(handler)),
        courier_client=courier,
        token_provider=lambda: "token-1",
    )

    result = merger.merge([WaybillSource(url="https://files.test/first.pdf"), WaybillSource(tracking_number="T1")])

    assert result.succeeded == ["https://files.test/first.pdf", "T1"]
    assert _page_widths(result.document) == [250, 210]


def test_build_sources_drops_blanks_and_puts_tracking_numbers_first():
    sources = build_sources(tracking_numbers=["T1", " ", ""], urls=["https://files.test/a.pdf", ""])
    assert [source.identifier for source in sources] == ["T1", "https://files.test/a.pdf"]


def test_source_needs_exactly_one_locator():
    with pytest.raises(ValueError):
        WaybillSource()
    with pytest.raises(ValueError):
        WaybillSource(tracking_number="T1", url="https://files.test/a.pdf")

"""Waybill retrieval and merging."""

from .merger import WaybillMerger, build_sources, merge_pdfs

__all__ = ["WaybillMerger", "build_sources", "merge_pdfs"]

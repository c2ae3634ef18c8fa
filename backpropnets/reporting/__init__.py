"""Reporting utilities for BackpropNets."""

from .metrics import ConsoleSink, CsvSink, JsonlSink
from .plots import PlotAdapter
from .summary import build_summary, write_summary

__all__ = ["ConsoleSink", "CsvSink", "JsonlSink", "PlotAdapter", "build_summary", "write_summary"]

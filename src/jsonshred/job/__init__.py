"""Batch shredding of JSON-lines event files."""

from jsonshred.job.runner import JobSummary, ShredJob, parse_event, shred_file
from jsonshred.job.sinks import GoodSink

__all__ = ["JobSummary", "ShredJob", "GoodSink", "parse_event", "shred_file"]

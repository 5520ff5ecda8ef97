"""Pipeline stages.

This package holds the record sources, transforms, and sinks that the
pipeline runner wires together one record at a time.
"""

"""Pipeline orchestration.

This package wires a source, a transform, and a sink into a fail-fast
run that keeps exactly one record in flight.
"""

"""Integration tests for components working together as a system.

The controller talks real HTTP through HttpxTransport to an in-process
FastAPI backend mounted with ASGITransport. No network access is required.
"""

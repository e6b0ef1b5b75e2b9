"""Test package for docchat.

Structure:
    - unit/: Individual function and class tests
    - integration/: Controller and HttpxTransport against a stub backend

Uses pytest with pytest-asyncio (auto mode) and pytest-check for soft
assertions.
"""

"""Unit tests for individual components in isolation.

Coverage:
    - client/: controller state machine, codec, instructions, access codes
    - client/transport: HTTP behaviour via httpx.MockTransport
    - ui/: rendering helpers

Uses an in-memory transport instead of the network.
"""

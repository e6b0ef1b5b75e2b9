"""NiceGUI interface - thin visualization layer for chat interactions.

Responsibilities:
    - Connection form for the backend URL and API keys
    - Chat message display with sources and turn errors
    - File upload interface for /ingest submissions
    - Model settings dialog

Contains no session logic. Delegates every turn to the SessionController.
"""

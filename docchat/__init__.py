"""docchat - chat front-end for a remote document Q&A backend.

Submits user messages and files to the backend and renders the exchange.

Components:
    - client: session controller, request codec, transport, access-code cache
    - models: Pydantic data model and wire schemas
    - ui: NiceGUI web interface
"""

__version__ = "0.1.0"

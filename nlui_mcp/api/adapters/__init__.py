"""
HTTP Stream Adapters
====================

Adapters that let a single request/response HTTP exchange drive a
stream-oriented protocol engine.

Components:
- http_request: Pseudo request stream built from a finished HTTP request
- http_response: Buffering pseudo response turned into a real HTTP response
- asgi_bridge: ASGI scope/receive/send view of the pseudo objects
- event_decoder: SSE / JSON body decoding into normalized events
"""

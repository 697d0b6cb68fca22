# Middleware package init
"""
Notify Backend: Middleware Package
===================================

Middleware Chain (outermost first):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Rate Limit first: abusive clients are rejected before any work
    2. Request ID: correlation id for every later log line
    3. Logging: method, path, status and duration with the request id
"""

# Middleware package init
"""
Memory Map Backend — Middleware Package
=========================================

Middleware Chain (order matters):
    Request → [Request ID] → [Rate Limit] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: generates the correlation ID used by logs and error bodies
    2. Rate Limit: rejects excess message submissions before any processing
    3. Logging: logs the request with its ID, status and duration

The order is reversed for responses, so the request ID header is present
on every response and the logged duration covers the whole handler.
"""

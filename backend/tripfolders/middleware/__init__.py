# Middleware package init
"""
TripFolders Backend — Middleware Package
=========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Method Override] → [Request ID] → [Logging] → [GZip] → Route Handler

    1. Method Override FIRST: routing and logging must see PUT/DELETE, not
       the POST the browser sent
    2. Request ID: correlation ID for every log line of the request
    3. Logging: method, path, status, duration, redirect target
"""

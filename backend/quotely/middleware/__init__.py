# Middleware package init
"""
Quotely Backend — Middleware Package
======================================

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID first, so every later log line can carry it
    2. Logging measures the full duration and sees the final status
    3. CORS answers the extension's preflight requests

Authentication is not middleware: it is a route dependency, so public
endpoints (auth, health, docs) need no exclusion list.
"""

# Routes package init
"""
Quotely Backend — API Routes Package
======================================

Route Inventory:
    - auth.py:    POST /api/auth/register, POST /api/auth/login
    - quotes.py:  POST/GET /api/quotes, GET /api/quotes/random,
                  GET/PUT/DELETE /api/quotes/{id}
    - health.py:  GET /health

Routes stay thin: read the request, call a service, shape the response.
"""

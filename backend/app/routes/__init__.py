"""
Notify Backend: API Routes Package
===================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - auth.py:    POST /api/auth/register, POST /api/auth/login
    - users.py:   /api/users directory, profiles and all friend endpoints
    - posts.py:   /api/posts feed, CRUD, likes and comments
    - health.py:  GET  /health

Routes stay thin: read the request, call a service, wrap the result in the
response envelope. Business rules live in app.services.
"""

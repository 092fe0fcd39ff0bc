# Routes package init
"""
Bookstore Backend — API Routes Package
========================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - auth.py:          POST /auth/register, POST /auth/login, GET /auth/me
    - genres.py:        /genre CRUD (reads public, writes authenticated)
    - books.py:         /books CRUD and GET /books/genre/{id} (authenticated)
    - transactions.py:  POST /transactions, GET /transactions,
                        GET /transactions/statistics, GET /transactions/{id}
    - health.py:        GET /health-check

Design Principle:
    Routes are THIN: pull values out of the request, call one service method,
    wrap the result in the {success, message, data} envelope. Errors are
    raised, never formatted here; main.py's handlers own the error body.
"""

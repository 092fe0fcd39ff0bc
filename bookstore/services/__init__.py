# Services package init
"""
Bookstore Backend — Services Layer
====================================

What:  Business logic between routes (HTTP) and stores (persistence).
How:   Services receive the request's AsyncSession, apply validation and
       business rules, call the stores, and return Pydantic schemas. Failures
       are raised as BookstoreError subclasses (see exceptions.py).

Service Inventory:
    - AuthService:       register, login (JWT issuance), profile
    - GenreService:      genre CRUD with soft delete
    - BookService:       book CRUD with soft delete, books by genre
    - OrderService:      atomic order placement, order listing/detail
    - StatisticsService: total orders, most/least ordered genre
"""

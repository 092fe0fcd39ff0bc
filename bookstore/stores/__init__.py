# Stores package init
"""
Bookstore Backend — Data Access Stores
========================================

What:  Query-building functions over the ORM models, grouped by aggregate.
How:   Plain async functions taking the caller's AsyncSession; they never
       open, commit or roll back transactions. Whatever transaction the
       caller has open (see database.transaction) is the one they run in.

Store Inventory:
    - catalog_store: genres and books (active lookups, duplicate checks,
      search pages, row-locked book fetch, guarded stock decrement)
    - order_store:   orders and order items (create, count, list, detail)
"""

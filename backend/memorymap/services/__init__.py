# Services package init
"""
Memory Map Backend — Services Layer
=====================================

Business logic between routes (HTTP) and the database (persistence).

Service Inventory:
    - MessageService: validates submissions, inserts and lists messages
"""

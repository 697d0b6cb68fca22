# Services package init
"""
Notify Backend: Services Layer
===============================

Business rules between the routes (HTTP) and the database. Every service is
constructed with the request's AsyncSession and never commits on its own;
the get_db_session dependency owns the transaction.

Service Inventory:
    - RelationshipManager: friend requests and the friendships they create
    - AuthService: registration, login, access tokens
    - UserService: user directory and profiles
    - PostService: posts, likes and comments
    - ImageService: upload validation and data-URI encoding
"""

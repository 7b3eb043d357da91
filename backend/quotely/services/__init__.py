# Services package init
"""
Quotely Backend — Services Layer
==================================

What:  Business logic between routes (HTTP) and the database (persistence).

Service Inventory:
    - CredentialStore: register users, verify passwords (bcrypt)
    - TokenIssuer: issue and validate HS256 bearer tokens
    - TagResolver: idempotent, race-safe per-user tag creation
    - QuoteRepository: quote create/update/delete incl. tag associations
    - QuoteQueryService: list, single read and random pick

CredentialStore and TokenIssuer carry configuration (cost factor, signing
secret) and are built per app in create_app(). The other three are stateless
module-level instances that receive the session on every call.
"""

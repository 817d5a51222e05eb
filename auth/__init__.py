"""auth/ -- Account authentication and authorization core.

Components, leaves first: passwords (hashing), store (accounts table),
registry (role tables), tokens (session JWTs), service (create/login flows),
transport + dependencies (cookies and request identity).

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/. api/ imports from auth/, not the other way around.
"""

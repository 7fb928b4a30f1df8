"""credentials/ -- Credential management package: registration, authentication,
and password/email changes over a relational credential store.

Layer rule: credentials/ imports only stdlib, third-party libraries, and core/.
Caller layers (CLI, HTTP, admin tooling) import from credentials/, not the
other way around.
"""

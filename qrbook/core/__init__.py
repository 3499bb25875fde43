"""
Shared, cross-cutting code for the client.

`core/` holds the small building blocks every feature uses (settings,
credential storage, transport, request gateway, error types). Keep
feature-specific logic in the corresponding feature package (e.g. `entries/`).
"""

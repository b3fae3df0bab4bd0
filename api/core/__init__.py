"""
Shared, cross-cutting code for the API.

`core/` holds the building blocks every record model uses (DB wiring,
settings, the SQL query builder, error types). Keep relation-specific SQL
in the corresponding feature package (e.g. `contents/`).
"""

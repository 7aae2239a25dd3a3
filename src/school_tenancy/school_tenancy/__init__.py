"""School tenancy package.

Schema-per-school provisioning on a shared PostgreSQL database, organized by
feature modules (schemas, catalog, backends, ...) on top of a small database layer.
"""

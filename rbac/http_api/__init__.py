"""
RBAC HTTP API - Framework-agnostic admin handlers.
"""

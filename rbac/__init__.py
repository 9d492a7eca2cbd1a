"""
RBAC - Admin Role-Based Access Control
======================================
Policy evaluator, persistence app and admin handlers.
"""

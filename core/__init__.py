"""
core — account and task search services.

Provides:
  • ``AccountService``: register / login / get / update / logout / authenticate
  • ``TaskSearchService``: filtered, paginated task listing
  • Typed errors in ``core.errors``
"""

"""
auth — credential primitives.

Provides:
  • Password hashing (bcrypt, work factor 10)
  • Opaque session token generation
"""

"""
auth — User authentication module.

Provides:
  • Password hashing (bcrypt, fixed- or random-salt policy)
  • Signing key material, initialised once per process
  • JWT (HS256) token creation & verification
  • ``get_current_claims`` FastAPI dependency
  • Authorize / protected API routes
"""

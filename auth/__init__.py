"""
auth: account registration and session issuance.

Provides:
  • Password hashing (bcrypt, salted, adaptive cost)
  • Bearer token creation & verification (JWT)
  • Register / login / logout / profile API routes
  • ``get_current_user_id`` FastAPI dependency
  • The error taxonomy shared with the client resolver
"""

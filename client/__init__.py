"""
client: the application side of login.

Provides:
  • ``AuthApiClient``: async HTTP transport for the /auth endpoints
  • ``SessionStore``: single-slot persisted session + pending registration
  • ``SessionResolver``: seed identity → pending registration → server
"""

"""
auth — account credentials and bearer tokens.

Provides:
  • Password hashing (salted HMAC, with legacy-format verification)
  • JWT issuance, validation and refresh
  • ``AuthService`` — signup / login / refresh / logout / delete-account
"""

"""Authentication and authorization.

Learn: one authentication path — email/password → signed JWT session
token (7 days) → Authorization: Bearer <token> on every protected call.

    credentials.py   email/password check (bcrypt, timing-equalized)
    jwt.py           TokenIssuer / TokenVerifier
    guard.py         AccessGuard: token + role (+ restaurant) check
    dependencies.py  FastAPI Depends() wrappers around the guard
    errors.py        tagged error kinds and their public responses
"""

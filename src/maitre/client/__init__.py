"""Client-side session handling.

Learn: the counterpart of the server's auth core, for anything that
talks to the API on a user's behalf (the CLI, scripts, a desktop app):

    store.py    where the token and cached user live between runs
    service.py  AuthService: HTTP calls to /auth/login and /auth/me
    session.py  SessionManager: the state machine presentation code watches
"""

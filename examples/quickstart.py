#!/usr/bin/env python3
"""
Maitre Quickstart — log in and walk the role-gated routes.

Logs in, shows who the token belongs to, then calls each protected route
to show which ones this user's role opens.
Run with: python examples/quickstart.py owner@bistro.test

Requires: pip install httpx
Backend must be running: http://localhost:5000 (maitre serve)
"""

import getpass
import sys

import httpx

BASE = "http://localhost:5000/api"


def main():
    if len(sys.argv) != 2:
        print("usage: quickstart.py EMAIL")
        sys.exit(2)
    email = sys.argv[1]
    client = httpx.Client(base_url=BASE, timeout=10)

    # ── Health check ──────────────────────────────────────────────
    print("Checking backend health...")
    try:
        resp = client.get("/health")
    except httpx.ConnectError:
        print(f"ERROR: Backend not reachable at {BASE}")
        print("Start it with:  maitre serve")
        sys.exit(1)
    health = resp.json()
    print(f"  Database: {'✓' if health['database'] == 'ok' else '✗'}")

    # ── Login ─────────────────────────────────────────────────────
    print("\n1. Logging in...")
    resp = client.post("/auth/login", json={"email": email, "password": getpass.getpass()})
    if resp.status_code != 200:
        print(f"   Login failed: {resp.json()['error']}")
        sys.exit(1)
    body = resp.json()
    user = body["user"]
    print(f"   {user['name']} ({user['role']}) at {user['restaurant']['name']}")
    client.headers["Authorization"] = f"Bearer {body['token']}"

    # ── Who am I ──────────────────────────────────────────────────
    print("\n2. Re-verifying the token...")
    resp = client.get("/auth/me")
    print(f"   /auth/me → {resp.status_code} {resp.json()['user']['email']}")

    # ── Role-gated routes ─────────────────────────────────────────
    print("\n3. Probing protected routes...")
    restaurant_id = user["restaurant"]["id"]
    for path in ("/restaurants/current", f"/restaurants/{restaurant_id}", "/admin/restaurants"):
        resp = client.get(path)
        outcome = "✓" if resp.status_code == 200 else resp.json()["error"]
        print(f"   {path:<48} {resp.status_code}  {outcome}")

    print("\nDone.")


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""Smoke-check a running TestGem API."""

import json
import os
import sys

import requests

BASE_URL = os.getenv("TESTGEM_URL", "http://localhost:8000")
TOKEN = os.getenv("TESTGEM_TOKEN", "local-dev-token")


def check_endpoint(path, method="GET", token=None, data=None, timeout=5):
    """Call one endpoint and summarize the outcome."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    try:
        response = requests.request(
            method, f"{BASE_URL}{path}", headers=headers, json=data, timeout=timeout
        )
    except requests.exceptions.ConnectionError:
        return {"status": "CONNECTION_ERROR", "error": "Cannot connect to server"}
    except requests.exceptions.Timeout:
        return {"status": "TIMEOUT", "error": "Request timed out"}
    return {
        "status": "SUCCESS",
        "status_code": response.status_code,
        "response": response.text[:500],
    }


def check_all_endpoints():
    """Hit the read-only endpoints and report which respond."""
    checks = [
        ("Health", "/health", None),
        ("Current user", "/api/me", TOKEN),
        ("Tests", "/api/tests", TOKEN),
        ("Notes", "/api/notes", TOKEN),
        ("Workspaces", "/api/workspaces", TOKEN),
        ("Unauthenticated tests", "/api/tests", None),
    ]

    results = {}
    for name, path, token in checks:
        result = check_endpoint(path, token=token)
        results[name] = result
        if result["status"] == "SUCCESS":
            print(f"{name:<24} HTTP {result['status_code']}")
            try:
                print("    " + json.dumps(json.loads(result["response"]))[:200])
            except ValueError:
                print("    " + result["response"][:100])
        else:
            print(f"{name:<24} {result['status']}: {result['error']}")

    if all(r["status"] != "SUCCESS" for r in results.values()):
        print("\nServer not reachable. Start it with: cd backend && python main.py")
    return results


if __name__ == "__main__":
    results = check_all_endpoints()
    sys.exit(0 if results["Health"]["status"] == "SUCCESS" else 1)

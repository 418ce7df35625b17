#!/usr/bin/env python3
"""
Walk the friend-request flow against a running server.

Signs up two users, onboards them, sends a request from A to B, declines it,
re-sends it, accepts it and checks both friend lists.
"""

import asyncio
import sys
from uuid import uuid4

import httpx

BASE_URL = "http://localhost:8000/api"


class Colors:
    """ANSI color codes for terminal output"""
    HEADER = '\033[95m'
    OKCYAN = '\033[96m'
    OKGREEN = '\033[92m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'


def print_success(message: str):
    print(f"{Colors.OKGREEN}[ok] {message}{Colors.ENDC}")


def print_error(message: str):
    print(f"{Colors.FAIL}[fail] {message}{Colors.ENDC}")


def print_info(message: str):
    print(f"{Colors.OKCYAN}[..] {message}{Colors.ENDC}")


def print_header(message: str):
    print(f"\n{Colors.HEADER}{Colors.BOLD}{'='*60}")
    print(f"  {message}")
    print(f"{'='*60}{Colors.ENDC}\n")


class SmokeFailure(Exception):
    pass


def expect(response: httpx.Response, status_code: int, what: str) -> dict:
    if response.status_code != status_code:
        print_error(f"{what}: expected {status_code}, got {response.status_code} {response.text}")
        raise SmokeFailure(what)
    print_success(what)
    return response.json()


async def make_user(client: httpx.AsyncClient, name: str, native: str, learning: str) -> dict:
    suffix = uuid4().hex[:8]
    body = expect(
        await client.post(f"{BASE_URL}/auth/signup", json={
            "full_name": name,
            "email": f"{name.lower()}_{suffix}@example.com",
            "password": "secret123",
        }),
        201,
        f"signup {name}",
    )
    headers = {"Authorization": f"Bearer {body['access_token']}"}
    expect(
        await client.post(f"{BASE_URL}/auth/onboarding", headers=headers, json={
            "full_name": name,
            "bio": f"{name} wants to practice {learning}",
            "native_language": native,
            "learning_language": learning,
            "location": "Tokyo",
        }),
        200,
        f"onboard {name}",
    )
    return {"id": body["user"]["id"], "headers": headers}


async def run_flow(client: httpx.AsyncClient):
    print_header("Friend Request Flow")

    alice = await make_user(client, "Alice", "english", "japanese")
    bob = await make_user(client, "Bob", "japanese", "english")

    print_info("Alice sends a request to Bob...")
    req = expect(
        await client.post(f"{BASE_URL}/users/friend-request/{bob['id']}", headers=alice["headers"]),
        201,
        "request created",
    )
    expect(
        await client.post(f"{BASE_URL}/users/friend-request/{bob['id']}", headers=alice["headers"]),
        409,
        "duplicate request rejected",
    )

    print_info("Bob declines...")
    expect(
        await client.put(f"{BASE_URL}/users/friend-request/{req['id']}/decline", headers=bob["headers"]),
        200,
        "request declined",
    )

    print_info("Alice re-sends, Bob accepts...")
    req = expect(
        await client.post(f"{BASE_URL}/users/friend-request/{bob['id']}", headers=alice["headers"]),
        201,
        "request re-sent",
    )
    expect(
        await client.put(f"{BASE_URL}/users/friend-request/{req['id']}/accept", headers=bob["headers"]),
        200,
        "request accepted",
    )

    alice_friends = expect(await client.get(f"{BASE_URL}/users/friends", headers=alice["headers"]), 200, "alice friends")
    bob_friends = expect(await client.get(f"{BASE_URL}/users/friends", headers=bob["headers"]), 200, "bob friends")
    if bob["id"] not in [f["id"] for f in alice_friends] or alice["id"] not in [f["id"] for f in bob_friends]:
        print_error("friendship is not symmetric")
        raise SmokeFailure("symmetry")
    print_success("friendship is symmetric")


async def main():
    print_info(f"Testing API at: {BASE_URL}")

    async with httpx.AsyncClient(timeout=10.0) as client:
        try:
            await client.get(f"{BASE_URL}/health")
        except httpx.ConnectError:
            print_error("Cannot connect to API server!")
            print_info("Start the server with: uvicorn app.main:app --reload")
            sys.exit(1)

        try:
            await run_flow(client)
        except SmokeFailure:
            sys.exit(1)

    print_header("Smoke Flow Completed")


if __name__ == "__main__":
    asyncio.run(main())

#!/usr/bin/env python3
"""Quick script to mint a development identity token signed with AUTH_JWT_SECRET."""
import sys
import uuid
from datetime import timedelta

from dotenv import load_dotenv, find_dotenv

env_path = find_dotenv()
if env_path:
    load_dotenv(env_path, override=False)

from inec_poll.core.security import create_access_token  # noqa: E402

if len(sys.argv) not in (2, 3):
    print("Usage: python issue_token.py <email> [user-id]")
    print()
    print("Example:")
    print("  python issue_token.py voter@example.com")
    sys.exit(1)

email = sys.argv[1]
user_id = sys.argv[2] if len(sys.argv) == 3 else str(uuid.uuid4())

token = create_access_token({"sub": user_id, "email": email}, expires_delta=timedelta(hours=8))

print("Token issued for user", user_id)
print()
print("Send it as a bearer token:")
print("-" * 80)
print(f"Authorization: Bearer {token}")
print("-" * 80)

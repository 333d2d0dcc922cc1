# scripts/create_developer.py
"""
Create (or reset) a developer-portal account.
Run this script once to create the initial developer login.

Usage:
    python scripts/create_developer.py [username] [password] [display name]

Falls back to DEV_USERNAME / DEV_PASSWORD / DEV_DISPLAY_NAME from the environment.
"""
import os
import sys
from pathlib import Path

# Ensure UTF-8 capable stdout/stderr on Windows terminals
try:
    sys.stdout.reconfigure(encoding="utf-8")
    sys.stderr.reconfigure(encoding="utf-8")
except Exception:
    pass

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from eduflow.core.config import Settings
from eduflow.core.security import hash_password
from eduflow.db.base import app_metadata
from eduflow.db.session import Database
from eduflow.models.dev_user import DevUser


def main(argv):
    settings = Settings.from_env()
    username = argv[1] if len(argv) > 1 else os.getenv("DEV_USERNAME", "")
    password = argv[2] if len(argv) > 2 else os.getenv("DEV_PASSWORD", "")
    display_name = argv[3] if len(argv) > 3 else os.getenv("DEV_DISPLAY_NAME") or username

    if not username or not password:
        print("[ERROR] Username and password are required (args or DEV_USERNAME / DEV_PASSWORD).")
        return 1

    print("=" * 60)
    print("Creating Developer Account")
    print("=" * 60)

    db = Database.from_url(settings.database_url, "app database")

    print("\n1) Testing database connection...")
    if not db.ping():
        print("[ERROR] Database connection failed!")
        print("   Please check:")
        print("   - PostgreSQL is running")
        print("   - Database exists")
        print("   - .env configuration is correct")
        return 1
    print("[OK] Database connected")

    print("\n2) Initializing database tables...")
    try:
        db.create_all(app_metadata)
        print("[OK] Tables initialized")
    except Exception as e:
        print(f"[ERROR] Failed to initialize tables: {e}")
        return 1

    print(f"\n3) Creating developer '{username}'...")
    try:
        with db.session() as session:
            existing = session.query(DevUser).filter(DevUser.username == username).first()
            if existing:
                print(f"[WARN] Developer '{username}' already exists. Updating password...")
                existing.password_hash = hash_password(password)
                existing.display_name = display_name
                existing.is_active = True
            else:
                session.add(DevUser(
                    username=username,
                    password_hash=hash_password(password),
                    display_name=display_name,
                    is_active=True,
                ))
        print(f"[OK] Developer '{username}' ready")
    except Exception as e:
        print(f"[ERROR] Error: {e}")
        return 1
    finally:
        db.dispose()

    print("\n" + "=" * 60)
    print("DEVELOPER ACCOUNT READY!")
    print("=" * 60)
    print("\nSign in to the developer portal with the credentials above.")
    print("\nStart the application with:")
    print(f"   python -m uvicorn eduflow.main:app --host 0.0.0.0 --port {settings.port}")
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))

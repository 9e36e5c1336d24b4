#!/usr/bin/env python3
"""
seed.py — run Alembic migrations for local dev and optionally create an admin
"""
import argparse, subprocess, sys
from pathlib import Path

from storefront.core.config import load_settings
from storefront.db.models import Role, User
from storefront.db.session import make_engine, make_session_factory
from storefront.security.utils import hash_password


def run_alembic(repo_root: Path):
    print(">>> Running Alembic migrations")
    subprocess.run(["alembic", "upgrade", "head"], cwd=repo_root, check=True)


def ensure_admin(settings, username: str, email: str, password: str):
    engine = make_engine(settings.DATABASE_URL)
    db = make_session_factory(engine)()
    try:
        user = db.query(User).filter(User.email == email).first()
        if user:
            print(f"Admin {email} already exists (id={user.id})")
            return
        user = User(username=username, email=email, password_hash=hash_password(password), role=Role.ADMIN)
        db.add(user); db.commit(); db.refresh(user)
        print(f"Created admin {email} (id={user.id})")
    finally:
        db.close()
        engine.dispose()


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--skip-migrations", action="store_true")
    ap.add_argument("--admin-email", help="Create an admin user with this email")
    ap.add_argument("--admin-username", default="admin")
    ap.add_argument("--admin-password")
    args = ap.parse_args()

    repo_root = Path(__file__).resolve().parents[1]
    settings = load_settings()
    print(f"Using DATABASE_URL = {settings.DATABASE_URL}")

    if not args.skip_migrations:
        run_alembic(repo_root)

    if args.admin_email:
        if not args.admin_password:
            sys.exit("--admin-password is required with --admin-email")
        ensure_admin(settings, args.admin_username, args.admin_email, args.admin_password)

    print("Done.")


if __name__ == "__main__":
    main()

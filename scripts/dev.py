#!/usr/bin/env python3
"""
Development helpers for WOD Scheduler
Run with: python scripts/dev.py [command]
"""

import argparse
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).parent.parent
SCHEMA_FILE = ROOT / "database" / "schema.sql"

# (description, command) pairs run by `check`, in order
CHECKS = [
    ("Checking code formatting", ["black", "--check", "."]),
    ("Checking import order", ["isort", "--check-only", "."]),
    ("Linting", ["flake8", "."]),
    ("Type checking", ["mypy", "app", "models", "services"]),
    ("Running tests", ["pytest", "-q"]),
]


def run_command(cmd: list[str], description: str = "") -> bool:
    if description:
        print(f"🚀 {description}")
    try:
        subprocess.run(cmd, check=True, cwd=ROOT)
    except FileNotFoundError:
        print(f"❌ {cmd[0]} is not installed (pip install -e '.[dev,test]')")
        return False
    except subprocess.CalledProcessError as e:
        print(f"❌ {' '.join(cmd)} exited with status {e.returncode}")
        return False
    return True


def serve(args):
    """Uvicorn with hot reload"""
    run_command(
        ["uvicorn", "main:app", "--reload", "--host", args.host, "--port", str(args.port)],
        f"Serving WOD Scheduler on http://{args.host}:{args.port}",
    )


def test(args):
    run_command(["pytest", "-v", *args.pytest_args], "Running tests")


def format_code(args):
    run_command(["black", "."], "Formatting with black")
    run_command(["isort", "."], "Sorting imports with isort")


def lint(args):
    run_command(["flake8", "."], "Linting with flake8")
    run_command(["mypy", "app", "models", "services"], "Type checking with mypy")


def check(args):
    results = [run_command(cmd, description) for description, cmd in CHECKS]
    if not all(results):
        print("❌ Some checks failed")
        sys.exit(1)
    print("✅ All checks passed")


def setup(args):
    """Create .env from the example file"""
    env_file = ROOT / ".env"
    if env_file.exists():
        print("📝 .env already exists, leaving it alone")
    else:
        env_file.write_text((ROOT / ".env.example").read_text())
        print("📝 Created .env, fill in SUPABASE_URL, the two keys and SESSION_SECRET")
    print("Next: python scripts/dev.py db-migrate, then python scripts/dev.py serve")


def db_migrate(args):
    """Supabase has no migration runner here; print the schema for the SQL editor"""
    print(f"🗄️ Paste {SCHEMA_FILE.relative_to(ROOT)} into the Supabase SQL editor:\n")
    print(SCHEMA_FILE.read_text())


def main():
    parser = argparse.ArgumentParser(description="WOD Scheduler development tools")
    sub = parser.add_subparsers(dest="command", required=True)

    serve_parser = sub.add_parser("serve", help="run the dev server")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.set_defaults(func=serve)

    test_parser = sub.add_parser("test", help="run pytest")
    test_parser.add_argument("pytest_args", nargs=argparse.REMAINDER)
    test_parser.set_defaults(func=test)

    for name, func in [
        ("format", format_code),
        ("lint", lint),
        ("check", check),
        ("setup", setup),
        ("db-migrate", db_migrate),
    ]:
        sub.add_parser(name, help=func.__doc__).set_defaults(func=func)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()

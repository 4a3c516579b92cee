"""Start a throwaway PostgreSQL container with a few tables to summarise."""

from __future__ import annotations

import argparse
import subprocess
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from absurdpg.config import ConfigIOError, ConfigStore, ConnectionProfileConfig

PROFILE_NAME = "Docker Sample"
DOCKER_IMAGE = "postgres:16-alpine"

SEED_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id SERIAL PRIMARY KEY,
    email TEXT NOT NULL UNIQUE
);
CREATE TABLE IF NOT EXISTS orders (
    id SERIAL PRIMARY KEY,
    user_id INTEGER REFERENCES users(id),
    total NUMERIC(10,2) NOT NULL
);
CREATE TABLE IF NOT EXISTS "audit log" (
    id SERIAL PRIMARY KEY,
    note TEXT
);
INSERT INTO users (email) VALUES
    ('anna@example.com'),
    ('ben@example.com'),
    ('cara@example.com')
ON CONFLICT DO NOTHING;
""".strip()


def docker(*args: str, check: bool = True, **kwargs) -> subprocess.CompletedProcess[str]:
    cmd = ["docker", *args]
    print("$", " ".join(cmd))
    return subprocess.run(cmd, check=check, text=True, **kwargs)


def ensure_container(args: argparse.Namespace) -> None:
    listed = subprocess.run(
        ["docker", "ps", "-a", "--filter", f"name=^{args.container}$", "--format", "{{.ID}}"],
        text=True,
        capture_output=True,
    )
    if listed.stdout.strip():
        docker("start", args.container, check=False)
        return
    docker(
        "run",
        "-d",
        "--name",
        args.container,
        "-e",
        f"POSTGRES_USER={args.user}",
        "-e",
        f"POSTGRES_PASSWORD={args.password}",
        "-e",
        f"POSTGRES_DB={args.database}",
        "-p",
        f"{args.port}:5432",
        DOCKER_IMAGE,
    )


def wait_until_ready(args: argparse.Namespace, retries: int = 20, delay: float = 1.0) -> bool:
    for _ in range(retries):
        probe = subprocess.run(
            ["docker", "exec", args.container, "pg_isready", "-U", args.user],
            text=True,
            capture_output=True,
        )
        if probe.returncode == 0:
            return True
        time.sleep(delay)
    return False


def seed(args: argparse.Namespace) -> None:
    docker(
        "exec",
        "-i",
        args.container,
        "psql",
        "-U",
        args.user,
        "-d",
        args.database,
        "-v",
        "ON_ERROR_STOP=1",
        input=SEED_SQL,
    )


def remember_profile(args: argparse.Namespace, store: ConfigStore) -> None:
    profile = ConnectionProfileConfig(
        name=PROFILE_NAME,
        host="localhost",
        port=str(args.port),
        user=args.user,
        password=args.password,
        dbname=args.database,
    )
    store.upsert(profile)
    print(f"Saved '{PROFILE_NAME}' profile to {store.path}.")


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--container", default="absurdpg-sample-db", help="Docker container name")
    parser.add_argument("--port", type=int, default=5544, help="Host port to expose Postgres on")
    parser.add_argument("--user", default="absurdpg", help="Database user")
    parser.add_argument("--password", default="absurdpg", help="Database password")
    parser.add_argument("--database", default="absurdpg_demo", help="Database name to create")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    try:
        ensure_container(args)
        if not wait_until_ready(args):
            print("Warning: database did not report ready state; continuing anyway.")
        seed(args)
    except FileNotFoundError:
        print("Docker is not installed or not on PATH.")
        return 1
    except subprocess.CalledProcessError as exc:
        print(f"Docker command failed with exit code {exc.returncode}.")
        return 1
    try:
        remember_profile(args, ConfigStore())
    except ConfigIOError as exc:
        print(f"Could not record the profile: {exc}")
        return 1
    print(
        "Sample database is ready. Enter these values in absurdpg: "
        f"user={args.user} password={args.password} host=localhost port={args.port} database={args.database}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

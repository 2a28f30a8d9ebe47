"""Write a development .env file and prepare the prompt studio database."""
from __future__ import annotations

import argparse
import os
import secrets
import shutil
import sys
from pathlib import Path
from typing import Dict

from werkzeug.security import generate_password_hash

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

DEFAULT_ENV_PATH = REPO_ROOT / ".env"
BACKUP_SUFFIX = ".bak"


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Create or update the .env file used by the prompt studio and initialise and seed "
            "the SQLite database."
        )
    )
    parser.add_argument("--secret-key", help="Session signing key (generated when missing).")
    parser.add_argument("--admin-username", help="Operator login name (default: admin).")
    parser.add_argument(
        "--admin-password",
        help="Operator password. Only its hash is written to .env as ADMIN_PASSWORD_HASH.",
    )
    parser.add_argument("--database-url", help="Override DATABASE_URL (optional).")
    parser.add_argument("--upload-folder", help="Directory for uploaded overlay images (optional).")
    parser.add_argument("--cors-origin", help="Origin allowed to open Socket.IO connections (optional).")
    parser.add_argument(
        "--env-path",
        type=Path,
        default=DEFAULT_ENV_PATH,
        help="Path to the .env file that should be created/updated.",
    )
    parser.add_argument(
        "--skip-db",
        action="store_true",
        help="Only update the .env file without touching the database.",
    )
    parser.add_argument(
        "--skip-seed",
        action="store_true",
        help="Create the tables but do not insert the sample events and style profiles.",
    )
    return parser.parse_args()


def read_env(path: Path) -> Dict[str, str]:
    if not path.exists():
        return {}
    data: Dict[str, str] = {}
    for line in path.read_text().splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, _, value = stripped.partition("=")
        data[key.strip()] = value.strip()
    return data


def write_env(path: Path, values: Dict[str, str]) -> None:
    if path.exists():
        backup_path = path.with_suffix(path.suffix + BACKUP_SUFFIX)
        shutil.copy(path, backup_path)
        print(f"Existing {path.name} backed up to {backup_path.name}.")
    lines = [f"{key}={value}" for key, value in values.items()]
    path.write_text("\n".join(lines) + "\n")
    print(f"Updated environment variables written to {path}.")


def update_env_file(args: argparse.Namespace) -> Dict[str, str]:
    env_data = read_env(args.env_path)
    env_updates = {"FLASK_APP": "wsgi.py"}
    if args.secret_key:
        env_updates["SECRET_KEY"] = args.secret_key
    elif "SECRET_KEY" not in env_data:
        env_updates["SECRET_KEY"] = secrets.token_hex(32)
    if args.admin_username:
        env_updates["ADMIN_USERNAME"] = args.admin_username
    if args.admin_password:
        env_updates["ADMIN_PASSWORD_HASH"] = generate_password_hash(args.admin_password)
        env_data.pop("ADMIN_PASSWORD", None)
    if args.database_url:
        env_updates["DATABASE_URL"] = args.database_url
    if args.upload_folder:
        env_updates["UPLOAD_FOLDER"] = args.upload_folder
    if args.cors_origin:
        env_updates["CORS_ORIGIN"] = args.cors_origin

    env_data.update(env_updates)
    write_env(args.env_path, env_data)
    return env_data


def initialize_database(env_values: Dict[str, str], seed: bool) -> None:
    # Config reads the environment at import time.
    os.environ.update(env_values)
    os.environ["SEED_ON_STARTUP"] = "false"
    from prompt_studio import create_app, seed_database
    from prompt_studio.extensions import db

    app = create_app()
    with app.app_context():
        db.create_all()
        if seed:
            seed_database()
        print(f"Database ready at {app.config['SQLALCHEMY_DATABASE_URI']}.")


def main() -> None:
    args = parse_args()
    env_values = update_env_file(args)

    if not args.skip_db:
        initialize_database(env_values, seed=not args.skip_seed)
    else:
        print("Database initialization skipped.")

    print("\nSetup complete! Summary:")
    for key in sorted(env_values):
        value = "<hidden>" if key in {"SECRET_KEY", "ADMIN_PASSWORD_HASH"} else env_values[key]
        print(f"  {key}={value}")


if __name__ == "__main__":
    main()

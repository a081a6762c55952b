import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from furnishop.config import load_config
from furnishop.database import Database
from furnishop.errors import StorageConnectionError, StoreError
from furnishop.users import UserRepository


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Insert a user into the furniture shop database")
    parser.add_argument("name", help="Display name for the user")
    parser.add_argument("email", help="Email address for the user")
    parser.add_argument("--age", type=int, default=0, help="Age of the user (default: 0)")
    parser.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to the YAML configuration (defaults to FURNISHOP_CONFIG or config/furnishop.yaml)",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()

    try:
        config = load_config(args.config_path)
        database = Database.connect(config.mongo_uri, config.database_name, timeout=config.connect_timeout)
    except (ValueError, StorageConnectionError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        users = UserRepository(database.collection(config.collection_name))
        user_id = users.create(args.name.strip(), args.email.strip(), age=args.age)
    except StoreError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        database.close()

    print(f"Created user {user_id}: {args.name.strip()} <{args.email.strip()}>")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

#!/usr/bin/env python3
"""
Migration script for the Community Forum API

Usage:
    python scripts/migrate.py upgrade        # Run all migrations
    python scripts/migrate.py downgrade -1   # Downgrade one revision
    python scripts/migrate.py create "Add new field"  # Create migration
    python scripts/migrate.py history        # Show migration history
    python scripts/migrate.py status         # Check migration status
"""
import asyncio
import argparse
import sys
from pathlib import Path

# Add the project root to the Python path
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

def upgrade(revision: str = "head") -> None:
    from forum_api.db.migrations import run_migrations

    print(f"🔧 Upgrading database to revision: {revision}")
    run_migrations(revision=revision)
    print("✅ Database upgraded successfully")

def downgrade(revision: str) -> None:
    from forum_api.db.migrations import downgrade_migration

    print(f"🔧 Downgrading database to revision: {revision}")
    downgrade_migration(revision)
    print("✅ Database downgraded successfully")

def create(message: str, autogenerate: bool = True) -> None:
    from forum_api.db.migrations import create_migration

    print(f"📝 Creating migration: {message}")
    create_migration(message, autogenerate)
    print("✅ Migration created successfully")

def history(verbose: bool = False) -> None:
    from alembic import command
    from forum_api.db.migrations import get_alembic_config

    print("📜 Migration History:")
    command.history(get_alembic_config(), verbose=verbose)

async def status() -> bool:
    from forum_api.db.migrations import current_revision, head_revision, check_migration_status

    print(f"📊 Current revision: {await current_revision()}")
    print(f"📊 Head revision:    {head_revision()}")
    return await check_migration_status()

async def reset_db(confirm: bool = False) -> None:
    """Drop all forum tables and migrate from scratch"""
    if not confirm:
        print("⚠️  WARNING: This will drop ALL tables and data!")
        print("   Use --confirm flag to proceed")
        return

    from forum_api.db.session import engine
    from forum_api.models import Base

    print("🗑️  Dropping all tables...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.exec_driver_sql("DROP TABLE IF EXISTS alembic_version")
    await engine.dispose()

    upgrade("head")
    print("✅ Database reset completed")

def main() -> None:
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description="Database Migration Manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s upgrade                 # Run all migrations
  %(prog)s downgrade -1            # Downgrade one revision
  %(prog)s create "Add new field"  # Create new migration
  %(prog)s status                  # Check migration status
  %(prog)s reset --confirm         # Reset database (DANGEROUS!)
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    upgrade_parser = subparsers.add_parser("upgrade", help="Upgrade database")
    upgrade_parser.add_argument("revision", nargs="?", default="head", help="Revision to upgrade to (default: head)")

    downgrade_parser = subparsers.add_parser("downgrade", help="Downgrade database")
    downgrade_parser.add_argument("revision", help="Revision to downgrade to (e.g., -1, base, or specific revision)")

    create_parser = subparsers.add_parser("create", help="Create new migration")
    create_parser.add_argument("message", help="Migration description")
    create_parser.add_argument("--no-autogenerate", action="store_true", help="Create empty migration without autogenerate")

    history_parser = subparsers.add_parser("history", help="Show migration history")
    history_parser.add_argument("--verbose", "-v", action="store_true", help="Show verbose output")

    subparsers.add_parser("status", help="Show migration status")

    reset_parser = subparsers.add_parser("reset", help="Reset database (DANGEROUS!)")
    reset_parser.add_argument("--confirm", action="store_true", help="Confirm database reset")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        if args.command == "upgrade":
            upgrade(args.revision)

        elif args.command == "downgrade":
            downgrade(args.revision)

        elif args.command == "create":
            create(args.message, not args.no_autogenerate)

        elif args.command == "history":
            history(args.verbose)

        elif args.command == "status":
            up_to_date = asyncio.run(status())
            sys.exit(0 if up_to_date else 1)

        elif args.command == "reset":
            asyncio.run(reset_db(args.confirm))

    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user")
        sys.exit(1)
    except Exception as e:
        print(f"❌ Error: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()

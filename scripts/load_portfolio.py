#!/usr/bin/env python3
"""Load a generated portfolio into a persistence backend.

Generates property drafts, adds them to the portfolio of one user scope
through the portfolio store, and optionally writes a backup snapshot.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from propfolio.backup import export_snapshot
from propfolio.config import BACKENDS, PropfolioConfig, StorageConfig
from propfolio.exceptions import PropfolioError
from propfolio.generators import PropertyDraftGenerator
from propfolio.logging import setup_logging
from propfolio.runtime import create_backend
from propfolio.store import PortfolioStore

logger = logging.getLogger(__name__)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Load a generated portfolio for one user")
    parser.add_argument(
        "--user",
        type=str,
        required=True,
        help="User id (scope) that owns the generated properties",
    )
    parser.add_argument(
        "--count",
        type=int,
        default=10,
        help="Number of properties to generate (default: 10)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed for reproducibility (default: 42)",
    )
    parser.add_argument(
        "--backend",
        type=str,
        choices=BACKENDS,
        default="json",
        help="Persistence backend (default: json)",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=Path("data"),
        help="Directory for the json backend (default: data)",
    )
    parser.add_argument(
        "--postgres-url",
        type=str,
        default=None,
        help="PostgreSQL connection string (overrides POSTGRES_* variables)",
    )
    parser.add_argument(
        "--reconcile",
        action="store_true",
        help="Replace placeholder records with the reference portfolio on load",
    )
    parser.add_argument(
        "--backup-dir",
        type=Path,
        default=None,
        help="Write a backup snapshot of the portfolio to this directory",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Log level (default: INFO)",
    )
    args = parser.parse_args()

    setup_logging(args.log_level)

    config = PropfolioConfig.from_env()
    config.storage = StorageConfig(backend=args.backend, data_dir=args.data_dir)

    if args.backend == "postgres" and args.postgres_url:
        from propfolio.persistence.postgres import PostgresBackend

        backend = PostgresBackend(args.postgres_url)
        backend.ensure_schema()
    else:
        backend = create_backend(config)

    logger.info("=" * 60)
    logger.info("PropFolio - Load Portfolio")
    logger.info("=" * 60)
    logger.info("User: %s", args.user)
    logger.info("Properties: %d", args.count)
    logger.info("Seed: %d", args.seed)
    logger.info("Backend: %s", args.backend)
    logger.info("=" * 60)

    store = PortfolioStore(
        backend,
        args.user,
        placeholder_prefix=config.reconciliation.placeholder_prefix,
        reconcile_on_load=args.reconcile,
    )
    try:
        store.load()
        generator = PropertyDraftGenerator(seed=args.seed, owner=args.user)
        for draft in generator.generate_batch(args.count):
            store.add(draft)

        summary = store.summary()
        logger.info(
            "Portfolio now holds %d active and %d trashed properties",
            summary["active"],
            summary["trashed"],
        )

        if args.backup_dir is not None:
            path = export_snapshot(store.list(), args.backup_dir)
            logger.info("Backup written to %s", path)
    except PropfolioError as e:
        logger.error("Load failed: %s", e)
        sys.exit(1)
    finally:
        store.close()
        close_backend = getattr(backend, "close", None)
        if callable(close_backend):
            close_backend()


if __name__ == "__main__":
    main()

"""
=========================================================
Command-line entry point for the staged TSV loader.
=========================================================

Creates a destination table from the header of the staged rows and loads
every row into it, optionally finishing with header removal, a primary key
and unique indexes.

Key Design Principles:
    - core.logger for console/file logging
    - ingestion.loader does the work; main.py is a thin CLI wrapper
    - Database errors surface with PostgreSQL's own message

Usage:
    # Load public.tsv_rows into public.hgnc_genes
    python main.py --namespace public --table hgnc_genes

    # Load, drop the header row and add keys
    python main.py --namespace public --table hgnc_genes \\
        --remove-header --primary-key hgnc_id --unique symbol

    # Print the generated statements without running them
    python main.py --namespace public --table hgnc_genes --dry-run

    # Check that the configured database answers
    python main.py --check-connection

Example:
    >>> from main import main
    >>> exit_code = main(['--namespace', 'public', '--table', 'hgnc_genes'])
"""

import argparse
import sys
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from core.config import config, decode_delimiter
from core.logger import get_logger, setup_logging
from ingestion.loader import TableLoaderError, TsvTableLoader
from ingestion.staging import StagingSource
from utils.database_utils import DatabaseConnectionError, verify_connection, wait_for_database

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the loader CLI."""
    parser = argparse.ArgumentParser(
        description="Create and populate a table from delimiter-separated rows staged in PostgreSQL",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Basic load
  python main.py --namespace public --table hgnc_genes

  # Load, remove the header row, then add keys
  python main.py --namespace public --table hgnc_genes --remove-header \\
      --primary-key hgnc_id --unique symbol

  # Create and load inside one transaction
  python main.py --namespace public --table hgnc_genes --atomic

  # Show the generated SQL only
  python main.py --namespace public --table hgnc_genes --dry-run

  # Check the database connection
  python main.py --check-connection
        """
    )

    # Destination
    parser.add_argument(
        '--namespace',
        type=str,
        default=None,
        help='Schema for the destination table (required unless --check-connection)'
    )
    parser.add_argument(
        '--table',
        type=str,
        default=None,
        help='Destination table name, must not exist yet (required unless --check-connection)'
    )

    # Staging overrides
    parser.add_argument(
        '--staging-schema',
        type=str,
        default=None,
        help=f'Schema of the staging table (default: {config.staging.schema})'
    )
    parser.add_argument(
        '--staging-table',
        type=str,
        default=None,
        help=f'Staging table name (default: {config.staging.table})'
    )
    parser.add_argument(
        '--staging-column',
        type=str,
        default=None,
        help=f'Column holding the raw rows (default: {config.staging.column})'
    )
    parser.add_argument(
        '--delimiter',
        type=str,
        default=None,
        help=r'Field delimiter, escapes such as \t accepted (default: tab)'
    )

    # Post-load steps
    parser.add_argument(
        '--remove-header',
        action='store_true',
        help='Delete the loaded header row after the load'
    )
    parser.add_argument(
        '--primary-key',
        type=str,
        default=None,
        help='Header column to turn into the primary key'
    )
    parser.add_argument(
        '--unique',
        type=str,
        action='append',
        default=None,
        metavar='COLUMN',
        help='Header column to give a unique index (repeatable)'
    )

    # Execution options
    parser.add_argument(
        '--atomic',
        action='store_true',
        help='Create and load in a single transaction'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Print the generated CREATE TABLE and INSERT statements and exit'
    )
    parser.add_argument(
        '--check-connection',
        action='store_true',
        help='Report whether the configured database answers and exit'
    )
    parser.add_argument(
        '--wait',
        type=int,
        default=0,
        metavar='RETRIES',
        help='Wait for the database to come up, retrying this many times'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging (DEBUG level)'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the loader CLI.

    Exit Codes:
        0: Success
        1: Error
        130: User interrupt (Ctrl+C)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.check_connection and not (args.namespace and args.table):
        parser.error('--namespace and --table are required')

    if args.verbose:
        setup_logging(log_level='DEBUG')

    try:
        if args.check_connection:
            ok, message = verify_connection()
            if ok:
                logger.info(f"✅ {message}")
                return 0
            logger.error(f"❌ {message}")
            return 1

        source = StagingSource.from_config(
            schema=args.staging_schema,
            table=args.staging_table,
            column=args.staging_column,
            delimiter=decode_delimiter(args.delimiter) if args.delimiter is not None else None
        )

        if args.wait:
            wait_for_database(max_retries=args.wait)

        loader = TsvTableLoader(source=source)

        if args.dry_run:
            print(loader.build_schema_statement(args.namespace, args.table) + ";\n")
            print(loader.build_load_statement(args.namespace, args.table) + ";")
            return 0

        result = loader.run(
            namespace=args.namespace,
            table=args.table,
            remove_header=args.remove_header,
            primary_key=args.primary_key,
            unique_columns=args.unique,
            atomic=args.atomic
        )

        logger.info(
            f"🎉 {result['table_name']}: {result['column_count']} columns, "
            f"{result['rows_loaded'] - result['header_removed']:,} data rows"
        )
        return 0

    except (TableLoaderError, DatabaseConnectionError, ValueError) as e:
        logger.error(f"❌ {e}")
        return 1
    except SQLAlchemyError as e:
        logger.error(f"❌ Database error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("\n⚠️  Operation interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"\n❌ Unexpected error: {e}", exc_info=True)
        return 1


if __name__ == '__main__':
    sys.exit(main())

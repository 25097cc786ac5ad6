"""Command line entry point: dashboard, company view, export and import."""

import argparse
import logging
import sys

from job_tracker.config import AppConfig, load_config, validate_config
from job_tracker.errors import ImportFormatError, StorageError
from job_tracker.insights.dashboard import compute_stats
from job_tracker.insights.relationships import details_for_name, is_overdue
from job_tracker.storage.persistence import PersistenceAdapter
from job_tracker.storage.slots import open_slot_store
from job_tracker.storage.store import TrackerStore
from job_tracker.storage.transfer import apply_import, import_summary, read_import_file, write_export
from job_tracker.utils.logging_config import setup_logging

logger = logging.getLogger("job_tracker")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Job Tracker - jobs, contacts, companies and tasks for your search",
    )
    parser.add_argument(
        "--config", default="config.yaml",
        help="Path to config file (default: config.yaml)",
    )
    action = parser.add_mutually_exclusive_group(required=True)
    action.add_argument(
        "--stats", action="store_true",
        help="Print dashboard statistics and exit",
    )
    action.add_argument(
        "--company", metavar="NAME",
        help="Print everything linked to a company",
    )
    action.add_argument(
        "--export", nargs="?", const="", metavar="DIR",
        help="Write an export file (default directory from config)",
    )
    action.add_argument(
        "--import", dest="import_file", metavar="FILE",
        help="Replace all data with the contents of an export file",
    )
    parser.add_argument(
        "--yes", action="store_true",
        help="Do not ask for confirmation before importing",
    )
    return parser.parse_args(argv)


def open_store(config: AppConfig):
    """Load the store from the configured slots and wire up persistence."""
    slots = open_slot_store(config.storage.backend, config.storage.database_url)
    store = TrackerStore.from_slots(slots, config.storage.key_prefix)
    PersistenceAdapter(slots, config.storage.key_prefix).attach(store)
    return slots, store


def print_stats(store: TrackerStore):
    stats = compute_stats(store)
    print("\n=== Job Tracker Dashboard ===")
    print(f"Total applications: {stats.total_jobs}")
    print(f"Active pipeline: {stats.active_pipeline}")
    print(f"In interview process: {stats.in_interview_process}")
    print(f"Offers: {stats.total_offers}")
    print(f"Success rate: {stats.success_rate}%")
    print(f"Response rate: {stats.response_rate}%")
    print(f"Interview rate: {stats.interview_rate}%")
    print(f"Pending tasks: {stats.pending_tasks}")
    print(f"Contacts: {stats.total_contacts}")
    print(f"Companies: {stats.total_companies}")

    print("\nApplications by status:")
    for status, count in stats.status_counts.items():
        if count:
            print(f"  {status}: {count}")

    if stats.jobs_with_notes:
        print(f"\nYou have detailed notes on {stats.jobs_with_notes} applications.")
    print()


def print_company(store: TrackerStore, name: str, recent_limit: int) -> bool:
    details = details_for_name(store, name, recent_limit)
    if details is None:
        print(f"No company named '{name}'")
        return False

    company = details.company
    print(f"\n=== {company.name} ===")
    for label, value in (("Website", company.website), ("Industry", company.industry), ("Location", company.location)):
        if value:
            print(f"{label}: {value}")
    print(f"Applications: {len(details.jobs)}")
    print(f"Contacts: {len(details.contacts)}")
    print(f"Tasks: {len(details.tasks)} ({details.pending_tasks} pending, {details.overdue_tasks} overdue)")

    if details.recent_jobs:
        print("\nRecent applications:")
        for job in details.recent_jobs:
            print(f"  {job.date_applied}  {job.title} [{job.status}]")
    if details.recent_tasks:
        print("\nRecent tasks:")
        for task in details.recent_tasks:
            flag = " OVERDUE" if is_overdue(task) else ""
            print(f"  {task.due_date or '-'}  {task.title} [{task.status}]{flag}")
    print()
    return True


def run_import(config: AppConfig, slots, store: TrackerStore, path: str, assume_yes: bool) -> bool:
    try:
        document = read_import_file(path)
    except (FileNotFoundError, ImportFormatError) as e:
        print(f"Import rejected: {e}")
        return False

    print(import_summary(store, document))
    if not assume_yes:
        answer = input("\nAre you sure you want to continue? [y/N] ").strip().lower()
        if answer not in ("y", "yes"):
            print("Import cancelled.")
            return False

    apply_import(slots, document, config.storage.key_prefix)
    # The running store is stale now; reload it from the new slots
    reloaded = TrackerStore.from_slots(slots, config.storage.key_prefix)
    print(
        f"Imported {len(reloaded.jobs)} jobs, {len(reloaded.contacts)} contacts, "
        f"{len(reloaded.companies)} companies, {len(reloaded.tasks)} tasks."
    )
    return True


def main(argv=None):
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(config.log_dir, config.log_level_value)

    for warning in validate_config(config):
        logger.warning("Config: %s", warning)

    try:
        slots, store = open_store(config)
    except (StorageError, ValueError) as e:
        logger.error("Could not open tracker data: %s", e)
        sys.exit(1)

    if args.stats:
        print_stats(store)
    elif args.company is not None:
        if not print_company(store, args.company, config.dashboard.recent_limit):
            sys.exit(1)
    elif args.export is not None:
        path = write_export(store, args.export or config.export.directory)
        print(f"Exported to {path}")
    elif args.import_file:
        if not run_import(config, slots, store, args.import_file, args.yes):
            sys.exit(1)


if __name__ == "__main__":
    main()

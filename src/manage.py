"""Cellar management CLI.

Schema management plus the periodic cart-reminder sweep, which a scheduler
(cron, a Kubernetes CronJob) runs every few minutes.

Usage:
    python src/manage.py setup-db            # Create all tables
    python src/manage.py drop-db             # Drop all tables
    python src/manage.py send-reminders      # Push cart reminders that are due
"""

import argparse
import sys


def _domain():
    from cellar.domain import cellar

    print("Initializing cellar domain...")
    cellar.init()
    return cellar


def setup_database():
    from cellar.utils.db import setup_db

    domain = _domain()
    print("Creating cellar database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    from cellar.utils.db import drop_db

    domain = _domain()
    print("Dropping cellar database schema...")
    drop_db(domain)
    print("Done.")


def send_reminders():
    from cellar.notification.reminder import ProcessDueReminders

    domain = _domain()
    with domain.domain_context():
        sent = domain.process(ProcessDueReminders(), asynchronous=False)
    print(f"Sent {sent} cart reminder(s).")


COMMANDS = {
    "setup-db": setup_database,
    "drop-db": drop_database,
    "send-reminders": send_reminders,
}


def main():
    parser = argparse.ArgumentParser(description="Cellar management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("send-reminders", help="Send cart reminders that are due")

    args = parser.parse_args()

    command = COMMANDS.get(args.command)
    if command is None:
        parser.print_help()
        sys.exit(1)
    command()


if __name__ == "__main__":
    main()

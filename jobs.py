# jobs.py
"""
Scheduled invoice jobs, meant to be run from cron.

     python jobs.py generate-monthly            # 1st of each month
     python jobs.py process-overdue             # daily
     python jobs.py process-overdue --manager-id 7
"""
import argparse
import logging
import sys

import config
from database import get_session_context
from dependencies import build_invoice_service, get_artifact_store, get_clock
from exceptions import InvoiceEngineError

logger = logging.getLogger("jobs")


def run_job(job: str, manager_id=None) -> int:
     """Run one batch job in its own session; returns a process exit code."""
     with get_session_context() as db:
          service = build_invoice_service(db, get_artifact_store(), get_clock())
          if job == "generate-monthly":
               report = service.run_monthly_generation(manager_id)
          else:
               report = service.run_overdue_sweep(manager_id)

     for outcome in report.outcomes:
          if outcome.outcome == "skipped":
               logger.info("%s: item %s skipped (%s)", job, outcome.item_id, outcome.reason)
     logger.info("%s finished: %d invoices", job, len(report.invoices))
     return 0


def main(argv=None) -> int:
     parser = argparse.ArgumentParser(description="Run invoice batch jobs.")
     parser.add_argument("job", choices=["generate-monthly", "process-overdue"])
     parser.add_argument("--manager-id", default=None, help="Limit the job to one manager's properties")
     args = parser.parse_args(argv)

     config.configure_logging()
     try:
          return run_job(args.job, args.manager_id)
     except InvoiceEngineError:
          logger.exception("%s aborted", args.job)
          return 1


if __name__ == "__main__":
     sys.exit(main())

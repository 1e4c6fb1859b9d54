import logging
import time

from vmigrate.models import RunSummary
from vmigrate.run_logging import log_success

logger = logging.getLogger('vmigrate')


class MigrationRunner:
    """
    Feeds VMs to the executor strictly in file order, one at a time, and
    keeps the run summary. A failing VM never stops the loop.
    """

    def __init__(self, executor, inter_vm_delay=5, dry_run=False, clock=time.monotonic,
                 sleep=time.sleep, logger=logger):
        self.executor = executor
        self.inter_vm_delay = inter_vm_delay
        self.dry_run = dry_run
        self.clock = clock
        self.sleep = sleep
        self.logger = logger
        self.outcomes = []

    def run(self, vm_ids, target_hosts):
        summary = RunSummary(total_vms=len(vm_ids))
        start = self.clock()
        self.logger.info(f"Starting migration of {summary.total_vms} VMs")

        for index, vm_id in enumerate(vm_ids, start=1):
            if index > 1 and not self.dry_run and self.inter_vm_delay > 0:
                # Throttle so the control plane is not flooded with requests.
                self.sleep(self.inter_vm_delay)

            self.logger.info(f"=== Processing VM {vm_id} ({index}/{summary.total_vms}) ===")
            outcome = self.executor.migrate(vm_id, target_hosts)
            self.outcomes.append(outcome)
            summary.record(outcome)

            if outcome.succeeded:
                log_success(self.logger, f"VM {vm_id} migration completed")
            else:
                self.logger.error(f"VM {vm_id} migration failed")

            self.logger.info(f"Progress: {index}/{summary.total_vms} completed "
                             f"(Success: {summary.succeeded}, Failed: {summary.failed})")
            self.logger.info(f"=== End processing VM {vm_id} ===")

        summary.elapsed_seconds = self.clock() - start
        return summary

    def log_summary(self, summary, log_file=None, error_log_file=None):
        self.logger.info("=== Migration Summary ===")
        self.logger.info(f"Total VMs processed: {summary.total_vms}")
        log_success(self.logger, f"Successful migrations: {summary.succeeded}")
        if summary.failed == 0:
            self.logger.info(f"Failed migrations: {summary.failed}")
        else:
            self.logger.error(f"Failed migrations: {summary.failed} ({', '.join(summary.failed_vms)})")
        self.logger.info(f"Total time: {int(summary.elapsed_seconds)} seconds")
        if log_file:
            self.logger.info(f"Log file: {log_file}")

        if summary.failed > 0:
            if error_log_file:
                self.logger.error(f"Error log: {error_log_file}")
        else:
            log_success(self.logger, "All migrations completed successfully!")

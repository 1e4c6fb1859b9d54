import logging
import time

from vmigrate.exceptions import (
    MigrationPlatformError,
    MigrationTimeoutError,
    UnsupportedStateError,
    VMMigrationError,
    VMNotFoundError,
    NoTargetHostError,
)
from vmigrate.hooks import HookRunner
from vmigrate.models import MigrationAttempt, MigrationKind, MigrationOutcome, Placement, VMStatus
from vmigrate.polling import Poller, RetryPolicy
from vmigrate.run_logging import log_success

logger = logging.getLogger('vmigrate')


class MigrationExecutor:
    """
    Moves one VM at a time to the least-loaded target host.

    Per VM: inspect the VM, select a target host, start a live (ACTIVE) or
    cold (SHUTOFF) migration, poll until the VM reaches the expected state
    and retry failed attempts up to `max_retries` attempts in total.
    Every VM ends with a MigrationOutcome; per-VM errors never propagate.
    """

    def __init__(self, cloud_state, selector, max_retries=3, timeout=600, poll_interval=10,
                 retry_backoff=30, enable_live=True, enable_cold=True, reinspect_on_retry=False,
                 dry_run=False, hooks=None, clock=time.monotonic, sleep=time.sleep, logger=logger):
        self.cloud_state = cloud_state
        self.selector = selector
        self.max_retries = max_retries
        self.timeout = timeout
        self.enable_live = enable_live
        self.enable_cold = enable_cold
        self.reinspect_on_retry = reinspect_on_retry
        self.dry_run = dry_run
        self.hooks = hooks or HookRunner(logger=logger)
        self.logger = logger
        self.poller = Poller(interval=poll_interval, timeout=timeout, clock=clock, sleep=sleep)
        self.retry_policy = RetryPolicy(max_attempts=max_retries, backoff=retry_backoff, sleep=sleep, logger=logger)

    def migrate(self, vm_id, target_hosts):
        self.logger.info(f"Processing VM: {vm_id}")

        if self.dry_run:
            return self._simulate(vm_id, target_hosts)

        outcome = MigrationOutcome(vm_id=vm_id, succeeded=False)
        try:
            self._process(vm_id, target_hosts, outcome)
        except VMMigrationError as e:
            outcome.succeeded = False
            outcome.error = e
            self.logger.error(str(e))
            if e.retryable:
                self.logger.error(f"Failed to migrate VM {vm_id} after {len(outcome.attempts)} attempts")
            self.hooks.run('on_failure', vm_id, outcome.target_host, error=e)
        except Exception as e:
            outcome.succeeded = False
            outcome.error = e
            self.logger.error(f"Unexpected error while migrating VM {vm_id}: {e}")
            self.hooks.run('on_failure', vm_id, outcome.target_host, error=e)
        return outcome

    def _process(self, vm_id, target_hosts, outcome):
        vm = self.cloud_state.get_vm(vm_id)
        if vm.status is VMStatus.NOT_FOUND:
            raise VMNotFoundError(vm_id)

        self.logger.info(f"VM {vm_id} status: {vm.raw_status}, current host: {vm.host_display}")

        decision = self.selector.select_target(vm.host, target_hosts)
        if decision.placement is Placement.ALREADY_ON_TARGET:
            outcome.succeeded = True
            outcome.skipped = True
            outcome.target_host = decision.host
            return
        if decision.placement is Placement.NO_HOST_AVAILABLE:
            raise NoTargetHostError(vm_id)

        target_host = decision.host
        outcome.target_host = target_host
        self.logger.info(f"Selected target host: {target_host} (current load: {decision.vm_count} VMs)")

        # Classified once; retries reuse it unless reinspect_on_retry is set.
        kind = self._migration_kind(vm)
        self.hooks.run('pre_migration', vm_id, target_host)

        def attempt(number):
            nonlocal kind
            if number > 1:
                self.logger.info(f"Retry attempt {number - 1}/{self.max_retries} for VM {vm_id}")
                if self.reinspect_on_retry:
                    kind = self._reinspect(vm_id)
            record = MigrationAttempt(vm_id=vm_id, target_host=target_host, kind=kind, attempt_number=number)
            outcome.attempts.append(record)
            self._perform(kind, vm_id, target_host)
            record.succeeded = True

        def attempt_failed(number, error):
            outcome.attempts[-1].error = error
            self.logger.error(str(error))
            self.logger.warning(f"{kind.value.capitalize()} migration failed for VM {vm_id} (attempt {number})")

        self.retry_policy.run(attempt, on_failure=attempt_failed)

        outcome.succeeded = True
        outcome.kind = kind
        log_success(self.logger, f"VM {vm_id} migrated successfully to {target_host}")
        self.hooks.run('post_migration', vm_id, target_host)

    def _migration_kind(self, vm):
        if vm.status is VMStatus.ACTIVE:
            if not self.enable_live:
                raise UnsupportedStateError(vm.vm_id, vm.raw_status, "live migration disabled by configuration")
            return MigrationKind.LIVE
        if vm.status is VMStatus.SHUTOFF:
            if not self.enable_cold:
                raise UnsupportedStateError(vm.vm_id, vm.raw_status, "cold migration disabled by configuration")
            return MigrationKind.COLD
        raise UnsupportedStateError(vm.vm_id, vm.raw_status)

    def _reinspect(self, vm_id):
        vm = self.cloud_state.get_vm(vm_id)
        if vm.status is VMStatus.NOT_FOUND:
            raise VMNotFoundError(vm_id)
        self.logger.info(f"VM {vm_id} status before retry: {vm.raw_status}, current host: {vm.host_display}")
        return self._migration_kind(vm)

    def _perform(self, kind, vm_id, target_host):
        if kind is MigrationKind.LIVE:
            self._live_migrate(vm_id, target_host)
        else:
            self._cold_migrate(vm_id, target_host)

    def _live_migrate(self, vm_id, target_host):
        self.logger.info(f"Starting live migration of VM {vm_id} to host {target_host}")
        self.cloud_state.live_migrate(vm_id, target_host)
        self.logger.info("Live migration initiated successfully")
        self.logger.info(f"Waiting for migration completion (timeout: {self.timeout}s)")

        def probe(elapsed):
            vm = self.cloud_state.get_vm(vm_id)
            if vm.status is VMStatus.ACTIVE:
                if vm.host == target_host:
                    log_success(self.logger, "Migration completed successfully")
                    self.logger.info(f"VM {vm_id} is now ACTIVE on host {target_host}")
                    return True
                self.logger.debug(f"VM {vm_id} is ACTIVE on host {vm.host_display}, waiting for {target_host} ({elapsed}s elapsed)")
            elif vm.status is VMStatus.MIGRATING:
                self.logger.info(f"Migration in progress... ({elapsed}s elapsed)")
            elif vm.status is VMStatus.ERROR:
                raise MigrationPlatformError(vm_id, f"VM {vm_id} entered ERROR state during migration")
            elif vm.status is VMStatus.NOT_FOUND:
                raise MigrationPlatformError(vm_id, f"VM {vm_id} not found during migration check")
            else:
                self.logger.warning(f"Unexpected VM status during migration: {vm.raw_status}")
            return False

        self.poller.poll(probe, on_timeout=lambda: MigrationTimeoutError(vm_id, self.timeout))

    def _cold_migrate(self, vm_id, target_host):
        self.logger.info(f"Starting cold migration of VM {vm_id} to host {target_host}")
        self.cloud_state.cold_migrate(vm_id, target_host)
        self.logger.info("Cold migration initiated successfully")

        def probe(elapsed):
            vm = self.cloud_state.get_vm(vm_id)
            if vm.status is VMStatus.VERIFY_RESIZE:
                self.logger.info("Cold migration completed, confirming resize")
                self.cloud_state.confirm_resize(vm_id)
                log_success(self.logger, "Cold migration completed and confirmed")
                return True
            if vm.status is VMStatus.MIGRATING:
                self.logger.info(f"Cold migration in progress... ({elapsed}s elapsed)")
            elif vm.status is VMStatus.ERROR:
                raise MigrationPlatformError(vm_id, f"VM {vm_id} entered ERROR state during cold migration")
            elif vm.status is VMStatus.NOT_FOUND:
                raise MigrationPlatformError(vm_id, f"VM {vm_id} not found during migration check")
            else:
                self.logger.info(f"Cold migration status: {vm.raw_status} ({elapsed}s elapsed)")
            return False

        self.poller.poll(probe, on_timeout=lambda: MigrationTimeoutError(vm_id, self.timeout))

    def _simulate(self, vm_id, target_hosts):
        self.logger.info(f"[DRY RUN] Simulating migration for VM {vm_id}")
        self.logger.info("[DRY RUN] Would check VM status and current host")
        self.logger.info(f"[DRY RUN] Would select best target host from available hosts: {', '.join(target_hosts)}")
        self.logger.info("[DRY RUN] Would execute: openstack server migrate --live-migration --host <target> "
                         f"{vm_id} (ACTIVE VMs)")
        self.logger.info(f"[DRY RUN] Would execute: openstack server migrate --host <target> {vm_id} "
                         f"&& openstack server resize confirm {vm_id} (SHUTOFF VMs)")
        for name in ('pre_migration', 'post_migration'):
            command = self.hooks.command_for(name)
            if command:
                self.logger.info(f"[DRY RUN] Would run {name} hook: {command}")
        log_success(self.logger, f"[DRY RUN] VM {vm_id} migration simulation completed")
        return MigrationOutcome(vm_id=vm_id, succeeded=True)

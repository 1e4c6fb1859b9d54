import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List

from vmigrate.cloud_state import API_ERRORS
from vmigrate.models import VMStatus

logger = logging.getLogger('vmigrate')


@dataclass
class VMReport:
    rows: List = field(default_factory=list)
    counts: Counter = field(default_factory=Counter)

    @property
    def total(self):
        return len(self.rows)


@dataclass
class HostReport:
    rows: List = field(default_factory=list)

    @property
    def available(self):
        return sum(1 for _, count in self.rows if count is not None)

    @property
    def unavailable(self):
        return sum(1 for _, count in self.rows if count is None)


@dataclass
class PlanningSummary:
    total: int = 0
    migratable: int = 0
    non_migratable: int = 0
    distribution: Dict[str, int] = field(default_factory=dict)


class StatusReporter:
    """
    Read-only reports over VMs and compute hosts for migration planning.
    Never issues a mutating call.
    """

    def __init__(self, cloud_state, logger=logger):
        self.cloud_state = cloud_state
        self.logger = logger

    def report_vms(self, vm_ids):
        report = VMReport()
        header = f"{'VM ID':<38} {'Name':<30} {'Status':<15} {'Host':<25}"
        self.logger.info("=== VM Status Report ===")
        self.logger.info(header)
        self.logger.info("-" * len(header))

        for vm_id in vm_ids:
            vm = self.cloud_state.get_vm(vm_id)
            report.rows.append(vm)
            report.counts[vm.status] += 1
            name = vm.name or (vm.raw_status if vm.status is VMStatus.NOT_FOUND else '')
            self.logger.info(f"{vm_id:<38} {name:<30} {vm.raw_status:<15} {vm.host_display:<25}")

        self.logger.info("=== Summary ===")
        self.logger.info(f"Total VMs: {report.total}")
        self.logger.info(f"Active VMs: {report.counts[VMStatus.ACTIVE]}")
        self.logger.info(f"Shutoff VMs: {report.counts[VMStatus.SHUTOFF]}")
        self.logger.info(f"Error VMs: {report.counts[VMStatus.ERROR]}")
        self.logger.info(f"Not Found VMs: {report.counts[VMStatus.NOT_FOUND]}")
        return report

    def report_hosts(self, hosts):
        report = HostReport()
        header = f"{'Host':<30} {'VM Count':<10} {'Status':<12}"
        self.logger.info("=== Host Status Report ===")
        self.logger.info(header)
        self.logger.info("-" * len(header))

        for host in hosts:
            vm_count = self.cloud_state.get_host_vm_count(host)
            report.rows.append((host, vm_count))
            if vm_count is None:
                self.logger.info(f"{host:<30} {'N/A':<10} {'Unavailable':<12}")
            else:
                self.logger.info(f"{host:<30} {vm_count:<10} {'Available':<12}")

        self.logger.info("=== Summary ===")
        self.logger.info(f"Total Hosts: {len(report.rows)}")
        self.logger.info(f"Available Hosts: {report.available}")
        self.logger.info(f"Unavailable Hosts: {report.unavailable}")
        return report

    def report_all_hosts(self):
        """
        Log every hypervisor. Returns the HostInfo list, or None when the
        hypervisor list cannot be retrieved.
        """
        self.logger.info("=== All Compute Hosts ===")
        try:
            hosts = self.cloud_state.list_hosts()
        except API_ERRORS as e:
            self.logger.error(f"Failed to retrieve hypervisor list: {e}")
            return None

        header = f"{'Host':<30} {'VM Count':<10} {'State':<8} {'Status':<10}"
        self.logger.info(header)
        self.logger.info("-" * len(header))
        for host in hosts:
            vm_count = 'N/A' if host.running_vms is None else host.running_vms
            line = f"{host.name:<30} {vm_count:<10} {host.state:<8} {host.status:<10}"
            if host.healthy:
                self.logger.info(line)
            else:
                self.logger.warning(line)
        return hosts

    def planning_summary(self, vm_ids):
        summary = PlanningSummary()
        for vm_id in vm_ids:
            vm = self.cloud_state.get_vm(vm_id)
            summary.total += 1
            if vm.status.migratable:
                summary.migratable += 1
                if vm.host:
                    summary.distribution[vm.host] = summary.distribution.get(vm.host, 0) + 1
            else:
                summary.non_migratable += 1

        self.logger.info("=== Migration Planning Summary ===")
        self.logger.info(f"Total VMs: {summary.total}")
        self.logger.info(f"Migratable VMs: {summary.migratable}")
        self.logger.info(f"Non-migratable VMs: {summary.non_migratable}")
        self.logger.info("Current VM Distribution:")
        for host, count in sorted(summary.distribution.items()):
            self.logger.info(f"  {host}: {count} VMs")

        self.logger.info("Migration Recommendations:")
        if summary.migratable > 0:
            self.logger.info(f"  {summary.migratable} VMs can be migrated")
            self.logger.info("  - Use live migration for ACTIVE VMs")
            self.logger.info("  - Use cold migration for SHUTOFF VMs")
        if summary.non_migratable > 0:
            self.logger.warning(f"  {summary.non_migratable} VMs require attention before migration")
            self.logger.warning("  - Check VMs in ERROR state")
            self.logger.warning("  - Verify VM existence")
        return summary

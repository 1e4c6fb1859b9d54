import logging

from vmigrate.models import PlacementDecision

logger = logging.getLogger('vmigrate')


class HostSelector:
    """
    Least-loaded placement over a fixed list of candidate hosts.

    `count_reader` is anything with a get_host_vm_count(hostname) method
    returning an int, or None when the count is unavailable. Counts are read
    on every decision and never kept between decisions.
    """

    def __init__(self, count_reader, strategy='vm_count', logger=logger):
        if strategy != 'vm_count':
            raise ValueError(f"Unsupported load balancing strategy: {strategy}")
        self.count_reader = count_reader
        self.strategy = strategy
        self.logger = logger

    def select_target(self, current_host, candidate_hosts):
        if current_host in candidate_hosts:
            self.logger.info(f"VM is already on target host {current_host} - no migration needed")
            return PlacementDecision.already_on_target(current_host)

        best_host = None
        min_count = None
        for host in candidate_hosts:
            vm_count = self.count_reader.get_host_vm_count(host)
            if vm_count is None:
                self.logger.warning(f"[HostSelector] VM count unavailable for host {host}; excluding it from selection")
                continue
            self.logger.debug(f"Host {host} has {vm_count} VMs")
            # Strict comparison keeps the first host seen on ties.
            if min_count is None or vm_count < min_count:
                min_count = vm_count
                best_host = host

        if best_host is None:
            self.logger.error("No suitable target host found")
            return PlacementDecision.no_host_available()

        return PlacementDecision.selected(best_host, min_count)

import logging

from keystoneauth1 import exceptions as ks_exceptions
from openstack import exceptions as sdk_exceptions

from vmigrate.exceptions import MigrationInitiationError, MigrationPlatformError
from vmigrate.models import HostInfo, VMInfo, VMStatus

logger = logging.getLogger('vmigrate')

API_ERRORS = (sdk_exceptions.SDKException, ks_exceptions.ClientException)
# openstacksdk raises ValueError for arguments the negotiated microversion cannot express.
INITIATION_ERRORS = API_ERRORS + (ValueError,)


class CloudState:
    """
    Read and mutate accessors over the compute control plane.

    Nothing is cached: every call is a fresh (and possibly already stale)
    snapshot, since other actors may change VMs and hosts at any time.
    """

    def __init__(self, connection, block_migration='auto', logger=logger):
        self.connection = connection
        self.block_migration = block_migration
        self.logger = logger

    @property
    def compute(self):
        return self.connection.compute

    def get_vm(self, vm_id):
        """
        Look a VM up by ID or name.
        Returns VMInfo; a VM that cannot be found (or looked up) has status NOT_FOUND.
        """
        try:
            server = self.compute.find_server(vm_id, ignore_missing=True, details=True, all_projects=True)
        except API_ERRORS as e:
            self.logger.warning(f"[CloudState] Lookup of VM {vm_id} failed: {e}")
            return VMInfo.not_found(vm_id)

        if server is None:
            return VMInfo.not_found(vm_id)

        raw_status = getattr(server, 'status', None) or ''
        status = VMStatus.parse(raw_status)
        if status is VMStatus.NOT_FOUND:
            return VMInfo.not_found(vm_id)

        return VMInfo(
            vm_id=vm_id,
            status=status,
            raw_status=raw_status.upper(),
            host=getattr(server, 'compute_host', None) or None,
            name=getattr(server, 'name', None)
        )

    def get_host_vm_count(self, hostname):
        """
        Count the VMs placed on a compute host across all projects.
        Returns None when the count could not be queried.
        """
        try:
            servers = self.compute.servers(details=False, all_projects=True, compute_host=hostname)
            return sum(1 for _ in servers)
        except API_ERRORS as e:
            self.logger.warning(f"[CloudState] Could not query VM count for host {hostname}: {e}")
            return None

    def list_hosts(self):
        """
        List every hypervisor with its running VM count, state and status.
        """
        hosts = []
        for hypervisor in self.compute.hypervisors(details=True):
            name = getattr(hypervisor, 'name', None)
            if not name:
                continue
            running_vms = getattr(hypervisor, 'running_vms', None)
            if running_vms is None:
                # Newer compute API versions no longer report running_vms.
                service = getattr(hypervisor, 'service_details', None) or {}
                running_vms = self.get_host_vm_count(service.get('host') or name)
            hosts.append(HostInfo(
                name=name,
                running_vms=running_vms,
                state=getattr(hypervisor, 'state', None) or 'unknown',
                status=getattr(hypervisor, 'status', None) or 'unknown'
            ))
        return hosts

    def live_migrate(self, vm_id, target_host):
        try:
            self.compute.live_migrate_server(vm_id, host=target_host, block_migration=self.block_migration)
        except INITIATION_ERRORS as e:
            raise MigrationInitiationError(vm_id, f"Failed to initiate live migration for VM {vm_id}: {e}") from e

    def cold_migrate(self, vm_id, target_host):
        try:
            self.compute.migrate_server(vm_id, host=target_host)
        except INITIATION_ERRORS as e:
            raise MigrationInitiationError(vm_id, f"Failed to initiate cold migration for VM {vm_id}: {e}") from e

    def confirm_resize(self, vm_id):
        try:
            self.compute.confirm_server_resize(vm_id)
        except API_ERRORS as e:
            raise MigrationPlatformError(vm_id, f"Failed to confirm resize for VM {vm_id}: {e}") from e

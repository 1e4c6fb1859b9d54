#!/usr/bin/env python3

import argparse
import logging
import sys

from vmigrate.cloud_state import CloudState
from vmigrate.config_loader import ConfigLoader
from vmigrate.connection_manager import ConnectionManager
from vmigrate.exceptions import FatalError
from vmigrate.input_loader import load_list
from vmigrate.run_logging import configure_console
from vmigrate.status_reporter import StatusReporter

logger = logging.getLogger('vmigrate')

DEFAULT_CONFIG = 'config/migration.yaml'


def build_parser():
    parser = argparse.ArgumentParser(
        description="Check the status of VMs and compute hosts for migration planning (read-only)",
        epilog="Examples:\n"
               "  vm-status-checker --vm-list examples/vm_list.txt\n"
               "  vm-status-checker --hosts examples/target_hosts.txt\n"
               "  vm-status-checker --all-hosts\n"
               "  vm-status-checker --summary --vm-list examples/vm_list.txt",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument("-v", "--vm-list", default=None, help="Check status of VMs from file")
    parser.add_argument("-H", "--hosts", default=None, help="Check status of hosts from file")
    parser.add_argument("-a", "--all-hosts", action="store_true", help="Show all compute hosts and their VM counts")
    parser.add_argument("-s", "--summary", action="store_true", help="Show migration summary statistics (needs --vm-list)")
    parser.add_argument("-c", "--config", default=DEFAULT_CONFIG, help=f"Configuration file (default: {DEFAULT_CONFIG})")
    parser.add_argument("--cloud", default=None, help="clouds.yaml entry to use (default: OS_* environment)")
    return parser


def run(args, config, connection_factory=ConnectionManager):
    cloud = args.cloud if args.cloud is not None else config.get_cloud_name()
    vm_ids = load_list(args.vm_list, kind="VM list") if args.vm_list else None
    hosts = load_list(args.hosts, kind="Hosts") if args.hosts else None

    connection_manager = connection_factory(cloud=cloud)
    try:
        connection_manager.require_authentication()
        reporter = StatusReporter(CloudState(connection_manager.connect()))

        if args.all_hosts:
            if reporter.report_all_hosts() is None:
                return 1
        if vm_ids:
            reporter.report_vms(vm_ids)
        if hosts:
            reporter.report_hosts(hosts)
        if args.summary and vm_ids:
            reporter.planning_summary(vm_ids)
        return 0
    finally:
        connection_manager.disconnect()


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not (args.all_hosts or args.vm_list or args.hosts):
        parser.print_usage()
        return 1

    handler = configure_console(fmt='%(message)s')
    try:
        config = ConfigLoader(args.config)
        return run(args, config)
    except FatalError as e:
        logger.error(f"ERROR: {e}")
        return 1
    finally:
        logger.removeHandler(handler)
        handler.close()


if __name__ == "__main__":
    sys.exit(main())

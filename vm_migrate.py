#!/usr/bin/env python3

import argparse
import logging
import sys

from vmigrate.cloud_state import CloudState
from vmigrate.config_loader import ConfigLoader
from vmigrate.connection_manager import ConnectionManager
from vmigrate.dependencies import check_dependencies
from vmigrate.exceptions import FatalError
from vmigrate.hooks import HookRunner
from vmigrate.host_selector import HostSelector
from vmigrate.input_loader import load_list
from vmigrate.migration_executor import MigrationExecutor
from vmigrate.orchestrator import MigrationRunner
from vmigrate.run_logging import run_logging

logger = logging.getLogger('vmigrate')

DEFAULT_CONFIG = 'config/migration.yaml'


def positive_int(value):
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def parse_args(argv=None):
    """
    Parse the command-line arguments.
    """
    parser = argparse.ArgumentParser(
        description="Migrate VMs one at a time to the least-loaded of a set of target compute hosts",
        epilog="Examples:\n"
               "  vm-migrate vm_list.txt target_hosts.txt\n"
               "  vm-migrate vm_list.txt target_hosts.txt --dry-run\n"
               "  vm-migrate vm_list.txt target_hosts.txt --config custom.yaml --verbose",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument("vm_list_file", help="File containing VM IDs (one per line)")
    parser.add_argument("hosts_file", help="File containing target host names (one per line)")
    parser.add_argument("-c", "--config", default=DEFAULT_CONFIG, help=f"Configuration file (default: {DEFAULT_CONFIG})")
    parser.add_argument("-d", "--dry-run", action="store_true", help="Show what would be done without executing")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("--max-retries", type=positive_int, default=None,
                        help="Maximum migration attempts per VM (default: 3)")
    parser.add_argument("--timeout", type=positive_int, default=None,
                        help="Migration timeout in seconds (default: 600)")
    parser.add_argument("--log-dir", default=None, help="Directory for run and error logs (default: logs)")
    parser.add_argument("--cloud", default=None, help="clouds.yaml entry to use (default: OS_* environment)")
    return parser.parse_args(argv)


def run(args, config, run_log, connection_factory=ConnectionManager):
    max_retries = args.max_retries if args.max_retries is not None else config.get_max_retries()
    timeout = args.timeout if args.timeout is not None else config.get_migration_timeout()
    cloud = args.cloud if args.cloud is not None else config.get_cloud_name()

    logger.info("Starting VM migration script")
    logger.info(f"VM list file: {args.vm_list_file}")
    logger.info(f"Target hosts file: {args.hosts_file}")
    logger.info(f"Max retries: {max_retries}")
    logger.info(f"Timeout: {timeout} seconds")
    logger.info(f"Dry run: {args.dry_run}")
    logger.info(f"Verbose: {args.verbose}")
    config.log_config()

    vm_ids = load_list(args.vm_list_file, kind="VM list")
    target_hosts = load_list(args.hosts_file, kind="Target hosts")
    logger.info("Input files validation passed")

    hooks = config.get_hooks()
    check_dependencies(hooks=hooks, cloud=cloud, dry_run=args.dry_run)

    connection_manager = None
    cloud_state = None
    selector = None
    try:
        if args.dry_run:
            logger.info("Skipping OpenStack authentication check in dry-run mode")
        else:
            connection_manager = connection_factory(cloud=cloud)
            connection_manager.require_authentication()
            cloud_state = CloudState(connection_manager.connect(), block_migration=config.get_block_migration())
            selector = HostSelector(cloud_state, strategy=config.get_strategy())

        logger.info(f"Loaded {len(vm_ids)} VMs and {len(target_hosts)} target hosts")

        executor = MigrationExecutor(
            cloud_state,
            selector,
            max_retries=max_retries,
            timeout=timeout,
            poll_interval=config.get_poll_interval(),
            retry_backoff=config.get_retry_backoff(),
            enable_live=config.is_live_migration_enabled(),
            enable_cold=config.is_cold_migration_enabled(),
            reinspect_on_retry=config.should_reinspect_on_retry(),
            dry_run=args.dry_run,
            hooks=HookRunner(hooks)
        )
        runner = MigrationRunner(executor, inter_vm_delay=config.get_inter_vm_delay(), dry_run=args.dry_run)

        summary = runner.run(vm_ids, target_hosts)
        runner.log_summary(summary, log_file=run_log.log_file, error_log_file=run_log.error_log_file)
        return summary.exit_code
    finally:
        if connection_manager is not None:
            connection_manager.disconnect()


def main(argv=None):
    args = parse_args(argv)
    config = ConfigLoader(args.config)
    log_dir = args.log_dir or config.get_log_directory()

    with run_logging(log_dir=log_dir, verbose=args.verbose, level=config.get_log_level()) as run_log:
        try:
            return run(args, config, run_log)
        except FatalError as e:
            logger.error(str(e))
            return 1


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.error("Interrupted by user")
        sys.exit(1)

import logging
import os
import shlex
import shutil

from vmigrate.exceptions import DependencyMissingError

logger = logging.getLogger('vmigrate')

CREDENTIAL_ENV_VARS = ('OS_CLOUD', 'OS_AUTH_URL')


def _hook_executable(command):
    try:
        argv = shlex.split(command)
    except ValueError:
        return None
    return argv[0] if argv else None


def find_missing_dependencies(hooks=None, cloud=None, environ=None, which=shutil.which):
    """
    List the external prerequisites that are not available: hook executables
    that cannot be resolved, and OpenStack credentials when neither a cloud
    name nor OS_CLOUD / OS_AUTH_URL is given.
    """
    environ = os.environ if environ is None else environ
    missing = []

    for name, command in sorted((hooks or {}).items()):
        executable = _hook_executable(command)
        if not executable or which(executable) is None:
            missing.append(f"{name} hook ({command})")

    if not cloud and not any(environ.get(var) for var in CREDENTIAL_ENV_VARS):
        missing.append("OpenStack credentials (set OS_CLOUD or source an openrc file)")

    return missing


def check_dependencies(hooks=None, cloud=None, dry_run=False, environ=None, which=shutil.which, logger=logger):
    """
    Raise DependencyMissingError when something is missing, except in
    dry-run mode where the run continues with a warning.
    """
    missing = find_missing_dependencies(hooks=hooks, cloud=cloud, environ=environ, which=which)
    if not missing:
        logger.info("Dependencies check passed")
        return []

    if not dry_run:
        raise DependencyMissingError(missing)
    logger.warning(f"Missing dependencies: {', '.join(missing)}")
    logger.warning("Continuing with dry run despite missing dependencies")
    return missing

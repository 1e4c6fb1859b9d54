import logging
import os
import shlex
import subprocess

logger = logging.getLogger('vmigrate')

HOOK_NAMES = ('pre_migration', 'post_migration', 'on_failure')


class HookRunner:
    """
    Runs the optional pre/post/failure hook commands.

    A hook is called as `<command> <vm_id> <target_host>` with the same
    values exported as VMIGRATE_* environment variables. Hook failures are
    logged and never change the outcome of a migration.
    """

    def __init__(self, hooks=None, timeout=300, runner=subprocess.run, logger=logger):
        hooks = hooks or {}
        unknown = sorted(set(hooks) - set(HOOK_NAMES))
        if unknown:
            logger.warning(f"[HookRunner] Ignoring unknown hooks: {', '.join(unknown)}")
        self.hooks = {name: command for name, command in hooks.items() if name in HOOK_NAMES}
        self.timeout = timeout
        self.runner = runner
        self.logger = logger

    def command_for(self, name):
        return self.hooks.get(name)

    def run(self, name, vm_id, target_host=None, error=None):
        """
        Run hook `name` if configured. Returns True when the hook is not
        configured or exits 0.
        """
        command = self.command_for(name)
        if not command:
            return True

        argv = shlex.split(command) + [vm_id, target_host or '']
        env = dict(os.environ)
        env.update({
            'VMIGRATE_HOOK': name,
            'VMIGRATE_VM_ID': vm_id,
            'VMIGRATE_TARGET_HOST': target_host or '',
            'VMIGRATE_ERROR': str(error) if error else ''
        })

        self.logger.debug(f"[HookRunner] Running {name} hook: {' '.join(argv)}")
        try:
            result = self.runner(argv, env=env, capture_output=True, text=True, timeout=self.timeout, check=False)
        except subprocess.TimeoutExpired:
            self.logger.warning(f"[HookRunner] {name} hook timed out after {self.timeout}s for VM {vm_id}")
            return False
        except OSError as e:
            self.logger.warning(f"[HookRunner] {name} hook could not be started for VM {vm_id}: {e}")
            return False

        if result.returncode != 0:
            output = (result.stderr or result.stdout or '').strip()
            self.logger.warning(f"[HookRunner] {name} hook exited with code {result.returncode} for VM {vm_id}: {output}")
            return False
        return True

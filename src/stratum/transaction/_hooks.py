"""Lifecycle hooks.

Hooks are shell commands configured per host and run around each
transition. A failing hook is reported but never changes the outcome of
the transition it surrounds.
"""

from collections.abc import Callable, Mapping

from structlog.typing import FilteringBoundLogger

from stratum.enums import HookName
from stratum.utils import ScriptConfig, ScriptResult, create_null_logger, run_script

HOOK_SHELL = "/bin/sh"


class HookRunner:
    """Runs configured hook commands for one repository.

    Each command receives STRATUM_REPOSITORY and STRATUM_HOOK in its
    environment.
    """

    __slots__ = ("_hooks", "_logger", "_runner")

    def __init__(
        self,
        hooks: Mapping[HookName, str] | None = None,
        *,
        runner: Callable[[ScriptConfig], ScriptResult] = run_script,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self._hooks = dict(hooks or {})
        self._runner = runner
        self._logger = logger or create_null_logger()

    def run(self, hook: HookName, repository: str) -> ScriptResult | None:
        """Run the command configured for ``hook``.

        Returns:
            The execution result, or None if no command is configured.
        """
        command = self._hooks.get(hook)
        if not command:
            return None

        result = self._runner(
            ScriptConfig(
                command=command,
                shell=HOOK_SHELL,
                env={"STRATUM_REPOSITORY": repository, "STRATUM_HOOK": str(hook)},
            )
        )
        if result.ok:
            self._logger.debug("hook_completed", hook=str(hook), repository=repository)
        else:
            self._logger.warning(
                "hook_failed",
                hook=str(hook),
                repository=repository,
                exit_code=result.exit_code,
                error=result.diagnostics,
            )
        return result

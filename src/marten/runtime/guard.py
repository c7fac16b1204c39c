"""Gate every server launch on a usable dotnet runtime."""

import logging
import re
from typing import Optional

from ..errors import ToolchainMissing, ToolchainTooOld, ToolchainVersionUnparseable
from ..utils.process import shell_exec
from .specs import DOTNET_SPEC, RuntimeSpec
from .types import ToolchainVersion

logger = logging.getLogger(__name__)


class ToolchainGuard:
    """Verifies the runtime prerequisite before the server is started.

    The guard is stateless: every call re-runs the version query, so a
    runtime installed while the host is running is picked up on the next
    start attempt.
    """

    def __init__(
        self,
        executable: Optional[str] = None,
        min_major: Optional[int] = None,
        spec: RuntimeSpec = DOTNET_SPEC,
    ):
        """Initialize guard.

        Args:
            executable: Runtime executable (defaults to the RuntimeSpec's executable)
            min_major: Minimum accepted major version (defaults to the RuntimeSpec's)
            spec: Runtime specification to check against
        """
        self.spec = spec
        self.executable = executable or spec.executable_name
        self.min_major = min_major if min_major is not None else spec.min_major

    async def probe(self) -> ToolchainVersion:
        """Query and parse the runtime version.

        Returns:
            Parsed ToolchainVersion

        Raises:
            ToolchainMissing: If the version query cannot run or prints nothing
            ToolchainVersionUnparseable: If the output is not a version
        """
        try:
            result = await shell_exec(self.executable, self.spec.version_check.args)
        except OSError as e:
            logger.error(f"Failed to get {self.spec.display_name} version: {e}")
            raise ToolchainMissing(self.executable, str(e)) from e

        output = result.stdout.strip()
        if result.returncode != 0 or not output:
            detail = result.stderr.strip() or f"exit code {result.returncode}"
            logger.error(f"Failed to get {self.spec.display_name} version: {detail}")
            raise ToolchainMissing(self.executable, detail)

        match = re.match(self.spec.version_check.parse, output)
        if not match:
            raise ToolchainVersionUnparseable(output)

        return ToolchainVersion(
            executable=self.executable,
            version=match.group(1),
            major=int(match.group(2)),
        )

    async def ensure_available(self) -> None:
        """Raise unless a runtime with at least ``min_major`` is available.

        Raises:
            ToolchainMissing: If the runtime cannot be executed
            ToolchainVersionUnparseable: If its version cannot be parsed
            ToolchainTooOld: If its major version is below ``min_major``
        """
        version = await self.probe()
        if version.major < self.min_major:
            raise ToolchainTooOld(version.version, self.min_major)
        logger.debug(f"{self.spec.display_name} {version.version} OK")

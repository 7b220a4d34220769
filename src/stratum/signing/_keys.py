"""Key material generation with openssl."""

from pathlib import Path

from structlog.typing import FilteringBoundLogger

from stratum.config import SigningKeys, ToolsConfig
from stratum.exceptions import SigningError
from stratum.services import ServiceResult
from stratum.utils import CommandRunner, create_null_logger, run_command

KEY_BITS = 2048
CERTIFICATE_DAYS = 365
PRIVATE_MODE = 0o400


class KeyGenerator:
    """Creates the master key pair, signing key and certificate of an origin.

    Only missing files are generated, so a repository recreated over existing
    keys keeps its identity.

    Example:
        >>> generator = KeyGenerator()
        >>> keys = SigningKeys.for_origin(Path("/etc/stratum/keys"), "acme.example.org")
        >>> generator.ensure(keys, "acme.example.org")
        ['master_key', 'public_key', 'private_key', 'certificate']
    """

    __slots__ = ("_logger", "_runner", "tools")

    def __init__(
        self,
        tools: ToolsConfig | None = None,
        *,
        runner: CommandRunner = run_command,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self.tools = tools or ToolsConfig()
        self._runner = runner
        self._logger = logger or create_null_logger()

    def _openssl(self, *arguments: str) -> None:
        argv = [self.tools.openssl, *arguments]
        self._logger.debug("openssl", argv=argv)
        _ = ServiceResult.from_script_result(self._runner(argv)).raise_for_status()

    def _restrict(self, path: Path) -> None:
        if path.exists():
            path.chmod(PRIVATE_MODE)

    def ensure(self, keys: SigningKeys, name: str) -> list[str]:
        """Generate whatever key material is missing.

        Args:
            keys: Paths of the key material.
            name: Repository name, used as the certificate subject.

        Returns:
            Names of the generated items, in generation order.

        Raises:
            SigningError: If the key set has no origin key paths.
            ExternalCommandError: If openssl fails.
        """
        if None in (keys.private_key, keys.certificate, keys.master_key):
            msg = f"Key set of '{name}' lacks an origin key file"
            raise SigningError(msg)

        keys.public_key.parent.mkdir(parents=True, exist_ok=True)
        generated: list[str] = []

        if not keys.master_key.exists():
            self._openssl("genrsa", "-out", str(keys.master_key), str(KEY_BITS))
            self._restrict(keys.master_key)
            generated.append("master_key")
        if not keys.public_key.exists():
            self._openssl(
                "rsa",
                "-in",
                str(keys.master_key),
                "-pubout",
                "-out",
                str(keys.public_key),
            )
            generated.append("public_key")
        if not keys.private_key.exists():
            self._openssl("genrsa", "-out", str(keys.private_key), str(KEY_BITS))
            self._restrict(keys.private_key)
            generated.append("private_key")
        if not keys.certificate.exists():
            self._openssl(
                "req",
                "-new",
                "-x509",
                "-days",
                str(CERTIFICATE_DAYS),
                "-key",
                str(keys.private_key),
                "-out",
                str(keys.certificate),
                "-subj",
                f"/CN={name} stratum release manager",
            )
            generated.append("certificate")

        if generated:
            self._logger.info("keys_generated", repository=name, items=generated)
        return generated


def remove_keys(keys: SigningKeys) -> list[Path]:
    """Delete the key files of a repository.

    Returns:
        The paths that existed and were removed.
    """
    removed: list[Path] = []
    for path in (keys.public_key, keys.private_key, keys.certificate, keys.master_key):
        if path is not None and path.exists():
            path.unlink()
            removed.append(path)
    return removed

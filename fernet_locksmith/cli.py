#!/usr/bin/env python3
"""Command-line interface for the Fernet Locksmith system."""

import argparse
import json
import logging
import os
import sys
from typing import Any, Optional

from fernet_locksmith.config import LockSmithConfig
from fernet_locksmith.constants import Constants
from fernet_locksmith.crypto_utils import CryptoUtils
from fernet_locksmith.exceptions import (
    AbsentError,
    DivergentKeysError,
    GenerationError,
    IntegrityError,
    LockSmithError,
    NoKeysFoundError,
    ReadError,
    ValidationError,
    VaultConnectionError,
    WriteError,
)
from fernet_locksmith.locksmith import LockSmith


class LockSmithCLI:
    """Command-line interface for the Locksmith."""

    _LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    def __init__(self) -> None:
        """Initialize the CLI."""
        self._parser = self._create_parser()
        self._pretty = False

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser.

        Returns:
            Configured argument parser
        """
        parser = argparse.ArgumentParser(
            description="Fernet Locksmith - Fernet key rotation across Vault backends",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Create the initial key set in two Vaults
  fernet-locksmith -a https://vault-a:8200 -a https://vault-b:8200 \\
    -k secret/fernet-keys bootstrap --period 86400 --num-keys 3

  # Run one rotation cycle
  fernet-locksmith -a https://vault-a:8200 -a https://vault-b:8200 \\
    -k secret/fernet-keys --ttl 300 smith

  # Rotate forever, checking every ttl seconds
  fernet-locksmith -a https://vault-a:8200 -k secret/fernet-keys --ttl 300 run

  # Show the key set age in every Vault
  fernet-locksmith -a https://vault-a:8200 -k secret/fernet-keys status

  # Print the key set held by the second Vault
  fernet-locksmith -a https://vault-a:8200 -a https://vault-b:8200 \\
    -k secret/fernet-keys show --backend https://vault-b:8200

  # Addresses and token from the environment
  VAULT_ADDR=https://vault-a:8200,https://vault-b:8200 VAULT_TOKEN=... \\
    fernet-locksmith smith
            """,
        )

        # Global arguments
        parser.add_argument(
            "-a",
            "--vault-address",
            action="append",
            dest="vault_addresses",
            help=f"Vault address, repeat for several backends (default: ${Constants.VAULT_ADDRESS_ENV()}, comma-separated)",
        )
        parser.add_argument(
            "-t",
            "--token",
            help="Vault token",
        )
        parser.add_argument(
            "-et",
            "--env-token",
            default=Constants.DEFAULT_TOKEN_ENV(),
            help=f"Environment variable containing the Vault token (default: {Constants.DEFAULT_TOKEN_ENV()})",
        )
        parser.add_argument(
            "-k",
            "--key-path",
            default=os.getenv("LOCKSMITH_KEY_PATH", Constants.DEFAULT_KEY_PATH()),
            help=f"Vault path of the key set (default: {Constants.DEFAULT_KEY_PATH()})",
        )
        parser.add_argument(
            "--ttl",
            type=int,
            default=Constants.DEFAULT_TTL(),
            help=f"Seconds before expiry at which keys are rotated, also written as the secret ttl (default: {Constants.DEFAULT_TTL()})",
        )
        parser.add_argument(
            "--timeout",
            type=int,
            default=Constants.DEFAULT_VAULT_TIMEOUT(),
            help=f"Vault request timeout in seconds (default: {Constants.DEFAULT_VAULT_TIMEOUT()})",
        )
        parser.add_argument(
            "--insecure",
            action="store_true",
            help="Do not verify Vault TLS certificates",
        )
        parser.add_argument(
            "--pretty",
            action="store_true",
            help="Pretty-print JSON outputs",
        )
        parser.add_argument(
            "-v",
            "--verbose",
            action="count",
            default=0,
            help="Increase log verbosity (-v info, -vv debug)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command",
            help="Available commands",
        )

        subparsers.add_parser(
            "smith",
            help="Run one rotation cycle",
        )

        run_parser = subparsers.add_parser(
            "run",
            help="Run rotation cycles at a fixed interval",
        )
        run_parser.add_argument(
            "-i",
            "--interval",
            type=int,
            help="Seconds between cycles (default: ttl)",
        )
        run_parser.add_argument(
            "-n",
            "--max-cycles",
            type=int,
            help="Stop after this many cycles",
        )

        bootstrap_parser = subparsers.add_parser(
            "bootstrap",
            help="Write a new key set to every Vault",
        )
        bootstrap_parser.add_argument(
            "-p",
            "--period",
            type=int,
            default=Constants.DEFAULT_PERIOD(),
            help=f"Rotation period in seconds (default: {Constants.DEFAULT_PERIOD()})",
        )
        bootstrap_parser.add_argument(
            "-n",
            "--num-keys",
            type=int,
            default=Constants.DEFAULT_NUM_KEYS(),
            help=f"Number of keys (minimum and default: {Constants.MIN_KEYS()})",
        )
        bootstrap_parser.add_argument(
            "-f",
            "--force",
            action="store_true",
            help="Overwrite existing keys",
        )

        subparsers.add_parser(
            "status",
            help="Show the key set held by every Vault",
        )

        show_parser = subparsers.add_parser(
            "show",
            help="Print the key set held by one Vault",
        )
        show_parser.add_argument(
            "-b",
            "--backend",
            help="Vault address to read (default: the first one)",
        )

        subparsers.add_parser(
            "check",
            help="Check that every Vault accepts the token",
        )

        subparsers.add_parser(
            "generate-key",
            help="Print a new Fernet key",
        )

        return parser

    def _configure_logging(self, verbosity: int) -> None:
        """Configure stderr logging from the -v count."""
        if verbosity >= 2:
            level = logging.DEBUG
        elif verbosity == 1:
            level = logging.INFO
        else:
            level = logging.WARNING
        logging.basicConfig(level=level, format=self._LOG_FORMAT, stream=sys.stderr)

    def _resolve_addresses(self, addresses: Optional[list[str]]) -> list[str]:
        """Use the command-line addresses, falling back to the environment."""
        if addresses:
            return [a.strip() for a in addresses if a.strip()]
        env_value = os.getenv(Constants.VAULT_ADDRESS_ENV(), "")
        return [a.strip() for a in env_value.split(",") if a.strip()]

    def _resolve_token(self, *, token: str | None, env_token: str | None) -> str | None:
        """Use the command-line token, falling back to the environment."""
        if token:
            return token
        if env_token:
            return os.getenv(env_token)
        return None

    def _get_config(self, args: argparse.Namespace) -> LockSmithConfig:
        """Build a LockSmithConfig from parsed arguments."""
        return self._get_config_with_dependencies(
            vault_addresses=self._resolve_addresses(args.vault_addresses),
            vault_token=self._resolve_token(token=args.token, env_token=args.env_token),
            key_path=args.key_path,
            ttl=args.ttl,
            timeout=args.timeout,
            verify=not args.insecure,
            interval=getattr(args, "interval", None),
            period=getattr(args, "period", Constants.DEFAULT_PERIOD()),
            num_keys=getattr(args, "num_keys", Constants.DEFAULT_NUM_KEYS()),
        )

    def _get_config_with_dependencies(
        self,
        *,
        vault_addresses: list[str],
        vault_token: str | None,
        key_path: str,
        ttl: int,
        timeout: int,
        verify: bool,
        interval: int | None,
        period: int,
        num_keys: int
    ) -> LockSmithConfig:
        """Build a LockSmithConfig with explicit dependencies.

        Raises:
            ValidationError: If a value is missing or invalid
        """
        if not vault_addresses:
            raise ValidationError(
                f"At least one Vault address (-a/--vault-address or "
                f"${Constants.VAULT_ADDRESS_ENV()}) is required"
            )
        if not vault_token:
            raise ValidationError(
                "A Vault token (-t/--token or -et/--env-token) is required"
            )

        return LockSmithConfig(
            vault_addresses=vault_addresses,
            vault_token=vault_token,
            key_path=key_path,
            ttl=ttl,
            timeout=timeout,
            verify=verify,
            interval=interval,
            period=period,
            num_keys=num_keys,
        )

    def _get_locksmith(self, args: argparse.Namespace) -> LockSmith:
        """Get a LockSmith instance based on arguments."""
        return LockSmith.from_config(self._get_config(args))

    def _print_json(self, payload: dict[str, Any]) -> None:
        """Print a JSON payload to stdout."""
        print(json.dumps(payload, indent=2 if self._pretty else None))

    def _print_error(self, *, message: str, code: str = "error", extra: dict[str, Any] | None = None) -> None:
        """Print a JSON error to stderr and exit non-zero."""
        error_obj = {
            "success": False,
            "error_code": code,
            "message": message,
        }
        if extra:
            error_obj["data"] = extra
        print(json.dumps(error_obj, indent=2), file=sys.stderr)
        sys.exit(1)

    def _print_locksmith_error(self, error: LockSmithError) -> None:
        """Report a LockSmithError with its code and backend details."""
        if isinstance(error, WriteError):
            self._print_error(message=str(error), code="write_error", extra={
                "backend": error.backend,
                "written": error.written,
            })
        elif isinstance(error, NoKeysFoundError):
            self._print_error(message=str(error), code="no_keys_found", extra={"backend": error.backend})
        elif isinstance(error, DivergentKeysError):
            self._print_error(message=str(error), code="divergent_keys", extra={"backends": error.backends})
        elif isinstance(error, AbsentError):
            self._print_error(message=str(error), code="absent", extra={"backend": error.backend})
        elif isinstance(error, ReadError):
            self._print_error(message=str(error), code="read_error", extra={"backend": error.backend})
        elif isinstance(error, IntegrityError):
            self._print_error(message=str(error), code="integrity_error", extra={"kind": error.kind.value})
        elif isinstance(error, GenerationError):
            self._print_error(message=str(error), code="generation_error")
        elif isinstance(error, VaultConnectionError):
            self._print_error(message=str(error), code="connection_error")
        elif isinstance(error, ValidationError):
            self._print_error(message=str(error), code="validation_error")
        else:
            self._print_error(message=str(error), code="locksmith_error")

    def _handle_smith(self, args: argparse.Namespace) -> None:
        """Handle smith command."""
        self._handle_smith_with_dependencies(locksmith=self._get_locksmith(args))

    def _handle_smith_with_dependencies(self, *, locksmith: LockSmith) -> None:
        """Handle smith command with explicit dependencies."""
        result = locksmith.smith()
        payload = {"success": True, "command": "smith"}
        payload.update(result.to_dict())
        self._print_json(payload)

    def _handle_run(self, args: argparse.Namespace) -> None:
        """Handle run command."""
        self._handle_run_with_dependencies(
            locksmith=self._get_locksmith(args),
            interval=args.interval,
            max_cycles=args.max_cycles
        )

    def _handle_run_with_dependencies(
        self,
        *,
        locksmith: LockSmith,
        interval: int | None,
        max_cycles: int | None
    ) -> None:
        """Handle run command with explicit dependencies.

        Args:
            locksmith: LockSmith instance
            interval: Seconds between cycles
            max_cycles: Stop after this many cycles
        """
        summary = locksmith.run(interval=interval, max_cycles=max_cycles)
        if summary.failures:
            self._print_error(
                message=f"{summary.failures} of {summary.cycles} cycles failed",
                code="cycles_failed",
                extra=summary.to_dict()
            )
        payload = {"success": True, "command": "run"}
        payload.update(summary.to_dict())
        self._print_json(payload)

    def _handle_bootstrap(self, args: argparse.Namespace) -> None:
        """Handle bootstrap command."""
        config = self._get_config(args)
        self._handle_bootstrap_with_dependencies(
            locksmith=LockSmith.from_config(config),
            period=config.period,
            num_keys=config.num_keys,
            force=args.force
        )

    def _handle_bootstrap_with_dependencies(
        self,
        *,
        locksmith: LockSmith,
        period: int,
        num_keys: int,
        force: bool
    ) -> None:
        """Handle bootstrap command with explicit dependencies."""
        result = locksmith.bootstrap(period, num_keys, force=force)
        payload = {"success": True, "command": "bootstrap"}
        payload.update(result.to_dict())
        self._print_json(payload)

    def _handle_status(self, args: argparse.Namespace) -> None:
        """Handle status command."""
        locksmith = self._get_locksmith(args)
        payload = {"success": True, "command": "status"}
        payload.update(locksmith.status())
        self._print_json(payload)

    def _handle_show(self, args: argparse.Namespace) -> None:
        """Handle show command."""
        self._handle_show_with_dependencies(
            locksmith=self._get_locksmith(args),
            backend=args.backend
        )

    def _handle_show_with_dependencies(self, *, locksmith: LockSmith, backend: str | None) -> None:
        """Handle show command with explicit dependencies."""
        fernet_keys = locksmith.read_keys(backend)
        payload = {
            "success": True,
            "command": "show",
            "backend": backend or locksmith.vaults[0].name,
        }
        payload.update(fernet_keys.to_dict())
        self._print_json(payload)

    def _handle_check(self, args: argparse.Namespace) -> None:
        """Handle check command."""
        locksmith = self._get_locksmith(args)
        backends = {vault.name: vault.is_authenticated() for vault in locksmith.vaults}
        if not all(backends.values()):
            rejected = [name for name, ok in backends.items() if not ok]
            self._print_error(
                message=f"Token rejected by {', '.join(rejected)}",
                code="authentication_error",
                extra={"backends": backends}
            )
        self._print_json({
            "success": True,
            "command": "check",
            "backends": backends,
        })

    def _handle_generate_key(self) -> None:
        """Handle generate-key command."""
        self._print_json({
            "success": True,
            "command": "generate-key",
            "key": CryptoUtils.generate_fernet_key(),
        })

    def run(self, args: Optional[list[str]] = None) -> None:
        """Run the CLI with given arguments."""
        try:
            parsed_args = self._parser.parse_args(args)
            self._pretty = bool(getattr(parsed_args, "pretty", False))
            self._configure_logging(parsed_args.verbose)

            if not parsed_args.command:
                self._print_error(message="No command specified", code="missing_command")

            # Handle commands
            if parsed_args.command == "smith":
                self._handle_smith(parsed_args)
            elif parsed_args.command == "run":
                self._handle_run(parsed_args)
            elif parsed_args.command == "bootstrap":
                self._handle_bootstrap(parsed_args)
            elif parsed_args.command == "status":
                self._handle_status(parsed_args)
            elif parsed_args.command == "show":
                self._handle_show(parsed_args)
            elif parsed_args.command == "check":
                self._handle_check(parsed_args)
            elif parsed_args.command == "generate-key":
                self._handle_generate_key()
            else:
                self._print_error(message=f"Unknown command: {parsed_args.command}", code="unknown_command")

        except LockSmithError as e:
            self._print_locksmith_error(e)
        except KeyboardInterrupt:
            self._print_error(message="Operation cancelled by user", code="cancelled")
        except Exception as e:
            self._print_error(message=str(e), code="unexpected_error")


def main() -> None:
    """Main entry point for the CLI."""
    cli = LockSmithCLI()
    cli.run()


if __name__ == "__main__":
    main()

"""Fernet key set rotation across Vault backends."""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

from fernet_locksmith.config import LockSmithConfig
from fernet_locksmith.constants import Constants
from fernet_locksmith.exceptions import (
    ConsistencyError,
    IntegrityError,
    LockSmithError,
    ValidationError,
)
from fernet_locksmith.models import FernetKeys, KeyGenerator
from fernet_locksmith.services.consistency import verify_consistency
from fernet_locksmith.services.scheduler import next_rotation_time, should_rotate
from fernet_locksmith.services.store_reader import read_fernet_keys, require_fernet_keys
from fernet_locksmith.services.store_writer import write_fernet_keys
from fernet_locksmith.validation_utils import check_keys_integrity, validate_key_path
from fernet_locksmith.vault import Vault

logger = logging.getLogger(__name__)


@dataclass
class CycleResult:
    """Outcome of one decision cycle."""

    rotated: bool
    fernet_keys: FernetKeys
    written: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary without key material."""
        return {
            "rotated": self.rotated,
            "num_keys": len(self.fernet_keys.keys or []),
            "creation_time": self.fernet_keys.creation_time,
            "period": self.fernet_keys.period,
            "written": list(self.written),
        }


@dataclass
class RunSummary:
    """Outcome of a bounded run of decision cycles."""

    cycles: int = 0
    failures: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "cycles": self.cycles,
            "failures": self.failures,
        }


class LockSmith:
    """Keeps one Fernet key set rotated and identical across Vault backends.

    Cycles must never overlap against the same backends: a cycle reads,
    then writes, and two interleaved cycles would produce divergence.
    """

    def __init__(
        self,
        vaults: Sequence[Vault],
        key_path: str,
        ttl: int,
        *,
        interval: Optional[int] = None,
        clock: Callable[[], float] = time.time,
        key_generator: Optional[KeyGenerator] = None
    ):
        """Initialize the locksmith.

        Args:
            vaults: Backends, in the order they are read and written
            key_path: Vault path of the key set
            ttl: Seconds; both the early-rotation margin and the ttl hint
                written with the keys
            interval: Seconds between cycles in run() (default: ttl)
            clock: Returns the current Unix time
            key_generator: Key generator used for rotation and bootstrap

        Raises:
            ValidationError: If arguments are invalid
        """
        if not vaults:
            raise ValidationError("At least one Vault backend is required")
        validate_key_path(key_path)
        if ttl < 1:
            raise ValidationError("ttl must be at least 1 second")

        self._vaults = list(vaults)
        self._key_path = key_path
        self._ttl = ttl
        self._interval = interval if interval is not None else ttl
        self._clock = clock
        self._key_generator = key_generator

    @classmethod
    def from_config(cls, config: LockSmithConfig) -> "LockSmith":
        """Create a LockSmith and its Vault backends from a configuration."""
        return cls(
            Vault.from_config(config),
            config.key_path,
            config.ttl,
            interval=config.interval,
        )

    @property
    def vaults(self) -> list[Vault]:
        return list(self._vaults)

    @property
    def key_path(self) -> str:
        return self._key_path

    @property
    def ttl(self) -> int:
        return self._ttl

    def _now(self) -> int:
        return int(self._clock())

    def read_all(self) -> list[tuple[str, Optional[FernetKeys]]]:
        """Read the key set from every backend in configured order.

        Raises:
            ReadError: On the first backend that cannot be read
        """
        return [
            (vault.name, read_fernet_keys(vault, self._key_path))
            for vault in self._vaults
        ]

    def read_keys(self, backend: Optional[str] = None) -> FernetKeys:
        """Read the key set held by one backend.

        Args:
            backend: Backend name (default: the first configured backend)

        Returns:
            The stored key set

        Raises:
            ValidationError: If backend is not configured
            AbsentError: If the backend holds no keys
            ReadError: If the backend cannot be read
        """
        if backend is None:
            vault = self._vaults[0]
        else:
            matches = [v for v in self._vaults if v.name == backend]
            if not matches:
                raise ValidationError(f"Unknown Vault backend: {backend}")
            vault = matches[0]
        return require_fernet_keys(vault, self._key_path)

    def write_keys(self, fernet_keys: FernetKeys) -> list[str]:
        """Write a key set to every backend in configured order.

        Raises:
            WriteError: On the first backend that fails
        """
        return write_fernet_keys(self._vaults, self._key_path, fernet_keys, self._ttl)

    def smith(self, now: Optional[int] = None) -> CycleResult:
        """Run one decision cycle.

        Reads the key set from every backend, checks that they agree and
        that the set is well formed, then rotates and writes it back if its
        age has reached the rotation time. Nothing is written unless every
        earlier step succeeded and nothing is retried.

        Args:
            now: Current Unix time (default: the clock)

        Returns:
            CycleResult describing what happened

        Raises:
            ReadError: If a backend cannot be read
            NoKeysFoundError: If a backend holds no keys
            DivergentKeysError: If backends hold different key sets
            IntegrityError: If the key set is malformed
            GenerationError: If the new key cannot be generated
            WriteError: If a backend write fails; earlier backends already
                hold the rotated set
        """
        fernet_keys = verify_consistency(self.read_all())
        check_keys_integrity(fernet_keys)

        if now is None:
            now = self._now()

        if not should_rotate(fernet_keys, now, self._ttl):
            logger.debug("All keys are fresh, no rotation needed", extra={
                "creation_time": fernet_keys.creation_time,
                "next_rotation": next_rotation_time(fernet_keys, self._ttl),
            })
            return CycleResult(rotated=False, fernet_keys=fernet_keys)

        logger.info("Time to rotate keys")
        fernet_keys.rotate(now=now, generator=self._key_generator)

        written = self.write_keys(fernet_keys)
        logger.info("Rotation complete", extra={
            "creation_time": fernet_keys.creation_time,
            "backends": written,
        })
        return CycleResult(rotated=True, fernet_keys=fernet_keys, written=written)

    def bootstrap(
        self,
        period: int = Constants.DEFAULT_PERIOD(),
        num_keys: int = Constants.DEFAULT_NUM_KEYS(),
        *,
        force: bool = False
    ) -> CycleResult:
        """Write a brand new key set to every backend.

        Refuses to overwrite existing keys unless force is set.

        Args:
            period: Rotation period in seconds
            num_keys: Number of keys in the set
            force: Overwrite backends that already hold keys

        Returns:
            CycleResult for the written key set

        Raises:
            ValidationError: If keys already exist and force is not set, or
                if period does not exceed the ttl
            ReadError: If a backend cannot be read
            GenerationError: If keys cannot be generated
            WriteError: If a backend write fails
        """
        if period <= self._ttl:
            raise ValidationError(f"Period ({period}s) must be greater than ttl ({self._ttl}s)")

        existing = [name for name, keys in self.read_all() if keys is not None]
        if existing and not force:
            raise ValidationError(
                f"Keys already exist in {', '.join(existing)}; use force to overwrite"
            )
        if existing:
            logger.warning(f"Overwriting existing keys in {', '.join(existing)}")

        fernet_keys = FernetKeys.generate(
            period,
            num_keys,
            now=self._now(),
            generator=self._key_generator,
        )
        written = self.write_keys(fernet_keys)
        logger.info("Bootstrap complete", extra={
            "num_keys": num_keys,
            "period": period,
            "backends": written,
        })
        return CycleResult(rotated=False, fernet_keys=fernet_keys, written=written)

    def status(self, now: Optional[int] = None) -> dict[str, Any]:
        """Describe the key set held by every backend.

        Absence and divergence are reported, not raised.

        Raises:
            ReadError: If a backend cannot be read
        """
        if now is None:
            now = self._now()
        results = self.read_all()

        backends = []
        for name, fernet_keys in results:
            entry: dict[str, Any] = {"backend": name, "present": fernet_keys is not None}
            if fernet_keys is not None:
                entry.update({
                    "num_keys": len(fernet_keys.keys or []),
                    "creation_time": fernet_keys.creation_time,
                    "period": fernet_keys.period,
                    "next_rotation": next_rotation_time(fernet_keys, self._ttl),
                    "rotation_due": should_rotate(fernet_keys, now, self._ttl),
                })
                try:
                    check_keys_integrity(fernet_keys)
                    entry["valid"] = True
                except IntegrityError as e:
                    entry["valid"] = False
                    entry["problem"] = str(e)
            backends.append(entry)

        try:
            verify_consistency(results)
            consistent = True
            problem = None
        except ConsistencyError as e:
            consistent = False
            problem = str(e)

        return {
            "now": now,
            "key_path": self._key_path,
            "consistent": consistent,
            "problem": problem,
            "backends": backends,
        }

    def run(
        self,
        *,
        interval: Optional[int] = None,
        max_cycles: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep
    ) -> RunSummary:
        """Run decision cycles at a fixed interval, one at a time.

        A failed cycle is logged and the next one runs as scheduled.

        Args:
            interval: Seconds between cycles (default: configured interval)
            max_cycles: Stop after this many cycles (default: never)
            sleep: Sleep function

        Returns:
            RunSummary with the cycles run and how many failed
        """
        if interval is None:
            interval = self._interval
        if interval < 1:
            raise ValidationError("interval must be at least 1 second")
        if max_cycles is not None and max_cycles < 1:
            raise ValidationError("max_cycles must be at least 1")

        summary = RunSummary()
        while max_cycles is None or summary.cycles < max_cycles:
            try:
                self.smith()
            except LockSmithError as e:
                summary.failures += 1
                logger.error(f"Doing nothing: {e}", extra={
                    "error_type": type(e).__name__,
                })
            summary.cycles += 1
            if max_cycles is not None and summary.cycles >= max_cycles:
                break
            sleep(interval)

        return summary

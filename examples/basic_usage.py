#!/usr/bin/env python3
"""Example demonstrating LockSmith against Vault backends from the environment.

Set VAULT_ADDR (comma-separated for several backends) and VAULT_TOKEN first,
for example against a dev server started with ``vault server -dev``.
"""

import json
import logging

from fernet_locksmith import LockSmith, LockSmithConfig, LockSmithError


def main():
    """Bootstrap a key set if needed, then run one decision cycle."""
    logging.basicConfig(level=logging.INFO)

    config = LockSmithConfig.from_env()
    locksmith = LockSmith.from_config(config)
    print(f"Backends: {', '.join(v.name for v in locksmith.vaults)}")

    status = locksmith.status()
    if not any(backend["present"] for backend in status["backends"]):
        print("\nNo keys found, bootstrapping a new key set")
        result = locksmith.bootstrap(config.period, config.num_keys)
        print(json.dumps(result.to_dict(), indent=2))

    print("\nRunning one decision cycle")
    try:
        result = locksmith.smith()
    except LockSmithError as e:
        print(f"Cycle failed: {e}")
        return

    print(json.dumps(result.to_dict(), indent=2))
    print("\nCurrent status:")
    print(json.dumps(locksmith.status(), indent=2))


if __name__ == "__main__":
    main()

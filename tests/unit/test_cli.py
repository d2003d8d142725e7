"""Unit tests for the CLI module."""

import json
import unittest
from io import StringIO
from unittest.mock import patch

from fernet_locksmith.cli import LockSmithCLI, main
from tests.test_utility import TestDataHelper, TestUtilities

T = TestDataHelper.CREATION_TIME
DUE = T + TestDataHelper.PERIOD - TestDataHelper.TTL
GLOBAL_ARGS = [
    "-a", "https://vault-a:8200",
    "-a", "https://vault-b:8200",
    "-t", "s.token",
    "-k", TestDataHelper.KEY_PATH,
    "--ttl", str(TestDataHelper.TTL),
]


class TestLockSmithCLI(unittest.TestCase):
    """Unit tests for LockSmithCLI."""

    def setUp(self):
        """Set up test fixtures."""
        self.cli = LockSmithCLI()
        self.vaults = [
            TestUtilities.create_vault("https://vault-a:8200", TestDataHelper.create_fernet_keys()),
            TestUtilities.create_vault("https://vault-b:8200", TestDataHelper.create_fernet_keys()),
        ]

    def _run(self, args, now=DUE):
        """Run the CLI against the fake backends, returning parsed stdout."""
        locksmith = TestUtilities.create_locksmith(self.vaults, now=now)
        with patch("fernet_locksmith.cli.LockSmith.from_config", return_value=locksmith) as mock_from_config:
            with patch("sys.stdout", new=StringIO()) as mock_stdout:
                self.cli.run(args)
        self.from_config_calls = mock_from_config.call_args_list
        return json.loads(mock_stdout.getvalue())

    def _run_error(self, args, now=DUE):
        """Run the CLI expecting failure, returning the parsed stderr object."""
        locksmith = TestUtilities.create_locksmith(self.vaults, now=now)
        with patch("fernet_locksmith.cli.LockSmith.from_config", return_value=locksmith):
            with patch("sys.stderr", new=StringIO()) as mock_stderr:
                with self.assertRaises(SystemExit) as cm:
                    self.cli.run(args)
        self.assertEqual(cm.exception.code, 1)
        # Log records may precede the JSON object
        output = mock_stderr.getvalue()
        return json.loads(output[output.find("{"):])

    def test_smith_rotates(self):
        output = self._run(GLOBAL_ARGS + ["smith"])

        self.assertTrue(output["success"])
        self.assertEqual(output["command"], "smith")
        self.assertTrue(output["rotated"])
        self.assertEqual(output["creation_time"], DUE)
        self.assertEqual(output["written"], ["https://vault-a:8200", "https://vault-b:8200"])
        self.assertNotIn("keys", output)

    def test_smith_builds_config_from_arguments(self):
        self._run(GLOBAL_ARGS + ["--timeout", "9", "--insecure", "smith"])

        config = self.from_config_calls[0].args[0]
        self.assertEqual(config.vault_addresses, ["https://vault-a:8200", "https://vault-b:8200"])
        self.assertEqual(config.vault_token, "s.token")
        self.assertEqual(config.ttl, TestDataHelper.TTL)
        self.assertEqual(config.timeout, 9)
        self.assertFalse(config.verify)

    def test_smith_margin_of_an_hour(self):
        output = self._run(GLOBAL_ARGS + ["--ttl", "3600", "smith"])

        self.assertTrue(output["success"])
        self.assertEqual(self.from_config_calls[0].args[0].ttl, 3600)

    def test_bootstrap_period_not_above_margin(self):
        self.vaults = [TestUtilities.create_vault("https://vault-a:8200")]

        error = self._run_error(GLOBAL_ARGS + ["bootstrap", "--period", str(TestDataHelper.TTL)])

        self.assertEqual(error["error_code"], "validation_error")
        self.assertIn("greater than ttl", error["message"])

    def test_smith_not_due(self):
        output = self._run(GLOBAL_ARGS + ["smith"], now=T)

        self.assertFalse(output["rotated"])
        self.assertEqual(output["written"], [])

    def test_smith_no_keys_found(self):
        self.vaults[1] = TestUtilities.create_vault("https://vault-b:8200")

        error = self._run_error(GLOBAL_ARGS + ["smith"])

        self.assertEqual(error["error_code"], "no_keys_found")
        self.assertEqual(error["data"]["backend"], "https://vault-b:8200")

    def test_smith_divergent(self):
        self.vaults[1] = TestUtilities.create_vault(
            "https://vault-b:8200", TestDataHelper.create_fernet_keys(creation_time=1)
        )

        error = self._run_error(GLOBAL_ARGS + ["smith"])

        self.assertEqual(error["error_code"], "divergent_keys")

    def test_smith_integrity_error(self):
        bad = TestDataHelper.create_fernet_keys(keys=["k1", "k2"])
        self.vaults = [TestUtilities.create_vault("https://vault-a:8200", bad)]

        error = self._run_error(GLOBAL_ARGS + ["smith"])

        self.assertEqual(error["error_code"], "integrity_error")
        self.assertEqual(error["data"]["kind"], "too_few_keys")

    def test_smith_write_error(self):
        self.vaults[1] = TestUtilities.create_vault(
            "https://vault-b:8200", TestDataHelper.create_fernet_keys(), fail_write=True
        )

        error = self._run_error(GLOBAL_ARGS + ["smith"])

        self.assertEqual(error["error_code"], "write_error")
        self.assertEqual(error["data"]["backend"], "https://vault-b:8200")
        self.assertEqual(error["data"]["written"], ["https://vault-a:8200"])

    def test_smith_read_error(self):
        self.vaults[0] = TestUtilities.create_vault("https://vault-a:8200", fail_read=True)

        error = self._run_error(GLOBAL_ARGS + ["smith"])

        self.assertEqual(error["error_code"], "read_error")
        self.assertEqual(error["data"]["backend"], "https://vault-a:8200")

    def test_run_single_cycle(self):
        output = self._run(GLOBAL_ARGS + ["run", "--interval", "5", "--max-cycles", "1"])

        self.assertEqual(output["command"], "run")
        self.assertEqual(output["cycles"], 1)
        self.assertEqual(output["failures"], 0)
        self.assertEqual(len(self.vaults[0].client.write_calls), 1)

    def test_run_with_failed_cycles(self):
        self.vaults[1] = TestUtilities.create_vault("https://vault-b:8200")

        error = self._run_error(GLOBAL_ARGS + ["run", "--max-cycles", "1"])

        self.assertFalse(error["success"])
        self.assertEqual(error["error_code"], "cycles_failed")
        self.assertEqual(error["data"], {"cycles": 1, "failures": 1})

    def test_show(self):
        output = self._run(GLOBAL_ARGS + ["show"])

        self.assertEqual(output["command"], "show")
        self.assertEqual(output["backend"], "https://vault-a:8200")
        self.assertEqual(output["keys"], TestDataHelper.create_keys())
        self.assertEqual(output["creation_time"], T)

    def test_show_absent_backend(self):
        self.vaults[1] = TestUtilities.create_vault("https://vault-b:8200")

        error = self._run_error(GLOBAL_ARGS + ["show", "--backend", "https://vault-b:8200"])

        self.assertEqual(error["error_code"], "absent")
        self.assertEqual(error["data"]["backend"], "https://vault-b:8200")

    def test_run_invalid_max_cycles(self):
        error = self._run_error(GLOBAL_ARGS + ["run", "--max-cycles", "0"])

        self.assertEqual(error["error_code"], "validation_error")

    def test_bootstrap(self):
        self.vaults = [TestUtilities.create_vault("https://vault-a:8200")]

        output = self._run(GLOBAL_ARGS + ["bootstrap", "--period", "86400", "--num-keys", "5"], now=T)

        self.assertEqual(output["command"], "bootstrap")
        self.assertEqual(output["num_keys"], 5)
        self.assertEqual(output["period"], 86400)
        self.assertEqual(output["creation_time"], T)
        self.assertEqual(len(TestUtilities.stored_keys(self.vaults[0]).keys), 5)

    def test_bootstrap_refuses_existing(self):
        error = self._run_error(GLOBAL_ARGS + ["bootstrap"])

        self.assertEqual(error["error_code"], "validation_error")

    def test_bootstrap_invalid_num_keys(self):
        error = self._run_error(GLOBAL_ARGS + ["bootstrap", "--num-keys", "2"])

        self.assertEqual(error["error_code"], "validation_error")

    def test_status(self):
        output = self._run(GLOBAL_ARGS + ["status"], now=T)

        self.assertEqual(output["command"], "status")
        self.assertTrue(output["consistent"])
        self.assertEqual(len(output["backends"]), 2)

    def test_check(self):
        output = self._run(GLOBAL_ARGS + ["check"])

        self.assertEqual(output["backends"], {
            "https://vault-a:8200": True,
            "https://vault-b:8200": True,
        })

    def test_check_rejected_token(self):
        self.vaults[1] = TestUtilities.create_vault("https://vault-b:8200", authenticated=False)

        error = self._run_error(GLOBAL_ARGS + ["check"])

        self.assertEqual(error["error_code"], "authentication_error")
        self.assertFalse(error["data"]["backends"]["https://vault-b:8200"])

    def test_generate_key(self):
        with patch("sys.stdout", new=StringIO()) as mock_stdout:
            self.cli.run(["generate-key"])

        output = json.loads(mock_stdout.getvalue())
        self.assertEqual(len(output["key"]), 44)

    def test_missing_address(self):
        with patch.dict("os.environ", {}, clear=True):
            error = self._run_error(["-t", "s.token", "smith"])

        self.assertEqual(error["error_code"], "validation_error")
        self.assertIn("Vault address", error["message"])

    def test_missing_token(self):
        with patch.dict("os.environ", {}, clear=True):
            error = self._run_error(["-a", "https://vault-a:8200", "smith"])

        self.assertEqual(error["error_code"], "validation_error")
        self.assertIn("token", error["message"])

    def test_address_and_token_from_environment(self):
        environ = {
            "VAULT_ADDR": "https://vault-a:8200,https://vault-b:8200",
            "LOCKSMITH_TOKEN": "s.env-token",
        }
        with patch.dict("os.environ", environ, clear=True):
            self._run(["-et", "LOCKSMITH_TOKEN", "--ttl", str(TestDataHelper.TTL), "status"], now=T)

        config = self.from_config_calls[0].args[0]
        self.assertEqual(config.vault_addresses, ["https://vault-a:8200", "https://vault-b:8200"])
        self.assertEqual(config.vault_token, "s.env-token")

    def test_no_command(self):
        with patch("sys.stderr", new=StringIO()) as mock_stderr:
            with self.assertRaises(SystemExit):
                self.cli.run([])

        self.assertEqual(json.loads(mock_stderr.getvalue())["error_code"], "missing_command")

    def test_main(self):
        with patch("sys.argv", ["fernet-locksmith", "generate-key"]):
            with patch("sys.stdout", new=StringIO()) as mock_stdout:
                main()

        self.assertTrue(json.loads(mock_stdout.getvalue())["success"])


if __name__ == "__main__":
    unittest.main()

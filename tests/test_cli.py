"""
Command line interface tests.
"""

import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest import mock

from hyperlink import HyperLink, InMemoryLedger, InvalidLink
from hyperlink import cli, config
from hyperlink.logging_config import configure_logging


def run(*argv):
    out, err = io.StringIO(), io.StringIO()
    with redirect_stdout(out), redirect_stderr(err):
        code = cli.main(["--log-level", "CRITICAL", *argv])
    return code, out.getvalue(), err.getvalue()


class TestCli(unittest.TestCase):

    def test_create_json(self):
        code, out, _ = run("create", "--version", "1", "--json")

        self.assertEqual(code, 0)
        data = json.loads(out)
        self.assertEqual(data["version"], 1)
        self.assertEqual(HyperLink.from_link(data["url"]).address, data["address"])

    def test_create_plain_prints_url(self):
        code, out, err = run("create", "-v", "1")

        self.assertEqual(code, 0)
        link = HyperLink.from_link(out.strip())
        self.assertIn(link.address, err)

    def test_create_invalid_version(self):
        code, _, err = run("create", "--version", "7")

        self.assertEqual(code, 1)
        self.assertIn("InvalidVersion", err)

    def test_inspect(self):
        link = HyperLink.create(1)
        code, out, _ = run("inspect", link.url)

        self.assertEqual(code, 0)
        data = json.loads(out)
        self.assertEqual(data["address"], link.address)
        self.assertNotIn(link.fragment, out)

    def test_inspect_invalid_link(self):
        code, _, err = run("inspect", "http://localhost:3000/i#0OIl")

        self.assertEqual(code, 1)
        self.assertIn("InvalidLink", err)

    def test_rotate_with_in_memory_ledger(self):
        ledger = InMemoryLedger(fee=5000)
        link = HyperLink.create(1)
        ledger.airdrop(link.public_key, 30000)

        with mock.patch.object(cli, "_ledger", return_value=ledger):
            code, out, _ = run("rotate", link.url, "--fee", "5000")

        self.assertEqual(code, 0)
        new = HyperLink.from_link(out.strip())
        self.assertEqual(ledger.get_balance(new.public_key), 25000)

    def test_rotate_insufficient_balance(self):
        ledger = InMemoryLedger(fee=5000)
        link = HyperLink.create(1)

        with mock.patch.object(cli, "_ledger", return_value=ledger):
            code, _, err = run("rotate", link.url, "--balance", "4000", "--fee", "5000")

        self.assertEqual(code, 1)
        self.assertIn("InsufficientBalance", err)

    def test_sweep(self):
        ledger = InMemoryLedger(fee=5000)
        link = HyperLink.create(1)
        wallet = HyperLink.create(1)
        ledger.airdrop(link.public_key, 15000)

        with mock.patch.object(cli, "_ledger", return_value=ledger):
            code, out, _ = run("sweep", link.url, wallet.address, "--fee", "5000")

        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["lamports"], 10000)
        self.assertEqual(ledger.get_balance(wallet.public_key), 10000)

    def test_balance(self):
        ledger = InMemoryLedger()
        link = HyperLink.create(1)
        ledger.airdrop(link.public_key, 1_500_000_000)

        with mock.patch.object(cli, "_ledger", return_value=ledger):
            code, out, _ = run("balance", link.url)

        self.assertEqual(code, 0)
        self.assertIn("1500000000 lamports", out)
        self.assertIn("1.500000000 SOL", out)

    def test_demo(self):
        code, out, _ = run("demo")

        self.assertEqual(code, 0)
        self.assertIn("same keypair: True", out)
        self.assertIn("Old balance: 0", out)

    def test_no_command(self):
        code, _, _ = run()
        self.assertEqual(code, 2)


class TestCliConfiguration(unittest.TestCase):

    def test_invalid_rpc_url_option(self):
        code, _, err = run("--rpc-url", "ftp://rpc.test", "balance", HyperLink.create(1).url)

        self.assertEqual(code, 2)
        self.assertIn("rpc_url", err)

    def test_invalid_rpc_url_setting(self):
        with mock.patch.object(config, "RPC_URL", "not a url"):
            code, _, err = run("create")

        self.assertEqual(code, 2)
        self.assertIn("rpc_url", err)

    def test_negative_transfer_fee(self):
        with mock.patch.object(config, "TRANSFER_FEE_LAMPORTS", -1):
            code, out, err = run("create")

        self.assertEqual(code, 2)
        self.assertIn("transfer_fee", err)
        self.assertEqual(out, "")

    def test_debug_reraises(self):
        with mock.patch.dict(os.environ, {"HYPERLINK_DEBUG": "1"}):
            with self.assertRaises(InvalidLink):
                run("inspect", "http://localhost:3000/i#0OIl")

    def test_unknown_log_level(self):
        err = io.StringIO()
        with redirect_stderr(err):
            with self.assertRaises(SystemExit) as ctx:
                cli.main(["--log-level", "LOUD", "create"])

        self.assertEqual(ctx.exception.code, 2)
        self.assertIn("invalid choice", err.getvalue())

    def test_log_level_case_insensitive(self):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = cli.main(["--log-level", "critical", "create"])

        self.assertEqual(code, 0)


class TestCliLogFile(unittest.TestCase):

    def tearDown(self):
        configure_logging(level="WARNING", json_format=True)

    def test_events_written_to_log_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "hyperlink.log")
            out, err = io.StringIO(), io.StringIO()
            with redirect_stdout(out), redirect_stderr(err):
                code = cli.main(["--log-level", "INFO", "--log-file", path, "create", "-v", "1"])
            # release the file before the directory is removed
            configure_logging(level="WARNING", json_format=True)

            with open(path) as f:
                contents = f.read()

        self.assertEqual(code, 0)
        link = HyperLink.from_link(out.getvalue().strip())
        self.assertIn("LINK_CREATED", contents)
        self.assertIn(link.address, contents)
        self.assertNotIn(link.fragment[1:], contents)


if __name__ == "__main__":
    unittest.main()

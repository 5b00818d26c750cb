from inspect import cleandoc
import io
import logging
from subprocess import CalledProcessError
import tempfile
import unittest
from unittest.mock import Mock, patch

from offloadlib.plumbing import ethtool, paths, systemd
from offloadlib.scripts import offload
from offloadlib.scripts.utils import ENTRYPOINTS

from .fakes import FakeEthtool, FakeSystemctl
from .scripts import no_args, with_bracket_iface, with_iface


class TestEntrypoint(unittest.TestCase):

    def test_entrypoints(self):
        self.assertIn("nic-scripts-no-args=tests.scripts:no_args", ENTRYPOINTS)
        self.assertIn("nic-offload-disable=offloadlib.scripts.offload:disable", ENTRYPOINTS)
        self.assertIn("nic-offload-status=offloadlib.scripts.offload:status", ENTRYPOINTS)

    def test_doc(self):
        self.assertEqual(cleandoc(no_args.__doc__), "Usage: nic-scripts-no-args")

    @patch("logging.basicConfig")
    def test_args(self, basic: Mock):
        opts, iface = with_iface({"IFACE": "eth0"})
        self.assertEqual(iface, "eth0")
        self.assertEqual(opts, {"IFACE": "eth0"})
        basic.assert_called_once_with(level=logging.INFO, format="%(message)s")

    @patch("logging.basicConfig")
    def test_args_bracket(self, basic: Mock):
        self.assertEqual(with_bracket_iface({"<iface>": "eth1"}), "eth1")

    @patch("logging.basicConfig")
    def test_debug(self, basic: Mock):
        with_iface({"IFACE": "eth0", "--debug": True})
        basic.assert_called_once_with(level=logging.DEBUG)

    @patch("logging.basicConfig")
    def test_parse_argv(self, basic: Mock):
        with patch("sys.argv", ["nic-scripts-with-iface", "--debug", "eno1"]):
            opts, iface = with_iface()
        self.assertEqual(iface, "eno1")
        basic.assert_called_once_with(level=logging.DEBUG)

    def test_usage_error(self):
        with patch("sys.argv", ["nic-offload-disable"]), \
                patch("sys.stderr", new_callable=io.StringIO):
            with self.assertRaises(SystemExit) as ctx:
                offload.disable()
        self.assertNotIn(ctx.exception.code, (0, None))

    def test_usage_error_extra(self):
        with patch("sys.argv", ["nic-offload-disable", "eth0", "eth1"]), \
                patch("sys.stderr", new_callable=io.StringIO):
            with self.assertRaises(SystemExit) as ctx:
                offload.disable()
        self.assertNotIn(ctx.exception.code, (0, None))


@patch("logging.basicConfig", Mock())
@patch("sys.stdout", new_callable=io.StringIO)
class TestDisable(unittest.TestCase):

    def setUp(self):
        self.tempdir = tempfile.TemporaryDirectory()
        self.tool = FakeEthtool(on=ethtool.FEATURES.values())
        self.systemctl = FakeSystemctl()
        self.patches = [patch("offloadlib.plumbing.host.is_root", Mock(return_value=True)),
                        patch("offloadlib.plumbing.host.get_tool",
                              Mock(side_effect=lambda name: "/usr/sbin/{}".format(name))),
                        patch("offloadlib.plumbing.host.interface_exists",
                              Mock(return_value=True)),
                        patch("offloadlib.plumbing.paths.UNIT_DIR", self.tempdir.name),
                        patch("offloadlib.scripts.offload.Ethtool", Mock(return_value=self.tool)),
                        patch("offloadlib.scripts.offload.Systemctl",
                              Mock(return_value=self.systemctl))]
        for patcher in self.patches:
            patcher.start()

    def tearDown(self):
        for patcher in reversed(self.patches):
            patcher.stop()
        self.tempdir.cleanup()

    def assertExit(self, code: int, stderr: str):
        with patch("sys.stderr", new_callable=io.StringIO) as err:
            with self.assertRaises(SystemExit) as ctx:
                offload.disable({"IFACE": "eno1"})
        self.assertEqual(ctx.exception.code, code)
        self.assertIn(stderr, err.getvalue())
        self.assertEqual(self.tool.calls, [])
        self.assertEqual(self.systemctl.calls, [])

    def test_not_root(self, stdout: io.StringIO):
        with patch("offloadlib.plumbing.host.is_root", Mock(return_value=False)):
            self.assertExit(1, "run as root")

    def test_missing_tool(self, stdout: io.StringIO):
        with patch("offloadlib.plumbing.host.get_tool", Mock(return_value=None)):
            self.assertExit(1, "ethtool not installed")

    def test_ethtool_checked_at_configured_path(self, stdout: io.StringIO):
        get_tool = Mock(side_effect=lambda name: None if name == paths.ETHTOOL else name)
        with patch("offloadlib.plumbing.host.get_tool", get_tool):
            self.assertExit(1, "/sbin/ethtool not installed")
        get_tool.assert_called_once_with("/sbin/ethtool")

    def test_missing_interface(self, stdout: io.StringIO):
        with patch("offloadlib.plumbing.host.interface_exists", Mock(return_value=False)):
            self.assertExit(1, "interface 'eno1' not found")

    def test_disable(self, stdout: io.StringIO):
        offload.disable({"IFACE": "eno1"})
        output = stdout.getvalue()
        self.assertIn("Interface: eno1", output)
        before, after = output.split("After (key offloads):")
        self.assertIn("Before (key offloads):\ngeneric-segmentation-offload: on\n", before)
        self.assertIn("tx-vlan-offload: on\n", before)
        self.assertIn("- tcp-segmentation-offload", before)
        self.assertIn("tx-vlan-offload: off\n", after)
        self.assertIn("All toggleable offloads are OFF.", after)
        self.assertTrue(output.rstrip().endswith("Done."))
        self.assertEqual(self.tool.calls, [ethtool.disable_settings()])
        self.assertEqual(self.systemctl.actions, ["daemon-reload", "enable", "start", "--no-pager"])

    def test_disable_twice(self, stdout: io.StringIO):
        offload.disable({"IFACE": "eno1"})
        self.tool.calls.clear()
        self.systemctl.calls.clear()
        offload.disable({"IFACE": "eno1"})
        self.assertEqual(self.tool.calls, [])
        self.assertEqual(self.systemctl.actions, ["--no-pager"])
        self.assertTrue(stdout.getvalue().rstrip().endswith("Done, nothing to change."))

    def test_unsupported_exit_zero(self, stdout: io.StringIO):
        self.tool.code = 1
        offload.disable({"IFACE": "eno1"})
        self.assertEqual(len(self.tool.calls), 1)

    def test_command_failure(self, stdout: io.StringIO):
        def call(*args, check=True, quiet=False):
            if args[0] == "enable":
                raise CalledProcessError(1, ["systemctl"] + list(args))
            return FakeSystemctl.call(self.systemctl, *args, check=check, quiet=quiet)
        self.systemctl.call = call
        with patch("sys.stderr", new_callable=io.StringIO) as err:
            with self.assertRaises(SystemExit) as ctx:
                offload.disable({"IFACE": "eno1"})
        self.assertEqual(ctx.exception.code, 1)
        self.assertIn("failed with exit code 1", err.getvalue())

    def test_status(self, stdout: io.StringIO):
        offload.status({"IFACE": "eno1"})
        output = stdout.getvalue()
        self.assertIn("Toggleable offloads currently ENABLED:", output)
        self.assertIn("not installed", output)
        self.assertEqual(self.systemctl.calls, [])

    def test_status_after_disable(self, stdout: io.StringIO):
        offload.disable({"IFACE": "eno1"})
        stdout.truncate(0)
        stdout.seek(0)
        offload.status({"IFACE": "eno1"})
        output = stdout.getvalue()
        self.assertIn("All toggleable offloads are OFF.", output)
        self.assertIn("runs the expected command", output)
        self.assertIn("Enabled: yes", output)
        self.assertIn("Active:  yes", output)

    def test_status_conflict(self, stdout: io.StringIO):
        with open(systemd.unit_path("eno1", self.tempdir.name), "w") as unit:
            unit.write("[Service]\nExecStart=/bin/true\n")
        offload.status({"IFACE": "eno1"})
        self.assertIn("Found:    /bin/true", stdout.getvalue())

    def test_status_second_exec_start_matches(self, stdout: io.StringIO):
        path = systemd.unit_path("eno1", self.tempdir.name)
        with open(path, "w") as unit:
            unit.write("[Service]\nExecStart=/bin/true\nExecStart={}\n"
                       .format(ethtool.expected_command(self.tool, "eno1")))
        offload.status({"IFACE": "eno1"})
        self.assertIn("runs the expected command", stdout.getvalue())
        self.assertNotIn("differs", stdout.getvalue())
        self.assertTrue(systemd.ensure_unit(path, "eno1",
                                            ethtool.expected_command(self.tool, "eno1")).value)

    def test_status_no_root_needed(self, stdout: io.StringIO):
        with patch("offloadlib.plumbing.host.is_root", Mock(return_value=False)):
            offload.status({"IFACE": "eno1"})
        self.assertIn("Interface: eno1", stdout.getvalue())


if __name__ == "__main__":
    unittest.main()

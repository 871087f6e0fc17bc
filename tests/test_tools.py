import subprocess
from collections import namedtuple

import psutil
import pytest

from portwho import tools as tools_mod
from portwho.errors import NoProcessFound, ToolError
from portwho.tools import LsofTools, PsutilTools, get_tools, run_command
from tests.conftest import LSOF_DESCRIPTOR_SAMPLE, LSOF_OWNER_SAMPLE


class FakeRun:
    """Replaces subprocess.run, answering by argv."""

    def __init__(self, responses):
        self.responses = responses
        self.argv = []

    def __call__(self, args, **kwargs):
        self.argv.append(args)
        key = tuple(args)
        if key not in self.responses:
            raise FileNotFoundError(2, "No such file or directory", args[0])
        code, out, err = self.responses[key]
        return subprocess.CompletedProcess(args, code, stdout=out, stderr=err)


@pytest.fixture
def fake_run(monkeypatch):
    def install(responses):
        runner = FakeRun(responses)
        monkeypatch.setattr(tools_mod.subprocess, "run", runner)
        return runner
    return install


class TestRunCommand:
    def test_missing_binary(self, fake_run):
        fake_run({})
        with pytest.raises(ToolError, match="lsof"):
            run_command(["lsof", "-v"])

    def test_bad_exit_status(self, fake_run):
        fake_run({("ps", "-p", "1"): (1, "", "")})
        with pytest.raises(ToolError, match="exit status 1"):
            run_command(["ps", "-p", "1"])

    def test_accepted_exit_status(self, fake_run):
        fake_run({("lsof", "-i", ":1"): (1, "", "")})
        assert run_command(["lsof", "-i", ":1"], ok_codes=(0, 1)) == ""


class TestLsofTools:
    def test_find_port_owner(self, fake_run):
        runner = fake_run({("lsof", "-i", ":8000", "-P"): (0, LSOF_OWNER_SAMPLE, "")})
        assert LsofTools().find_port_owner(8000) == ("python", 4242)
        assert runner.argv == [["lsof", "-i", ":8000", "-P"]]

    def test_no_rows(self, fake_run):
        fake_run({("lsof", "-i", ":8000", "-P"): (1, "", "")})
        with pytest.raises(NoProcessFound):
            LsofTools().find_port_owner(8000)

    def test_lsof_missing(self, fake_run):
        fake_run({})
        with pytest.raises(ToolError) as exc:
            LsofTools().find_port_owner(8000)
        assert not isinstance(exc.value, NoProcessFound)

    def test_query_attribute_uses_ps(self, fake_run):
        fake_run({("ps", "-p", "4242", "-o", "rss="): (0, "  204800\n", "")})
        assert LsofTools().query_attribute(4242, "rss") == "204800"

    def test_query_dead_pid(self, fake_run):
        fake_run({("ps", "-p", "4242", "-o", "user="): (1, "", "")})
        with pytest.raises(ToolError):
            LsofTools().query_attribute(4242, "user")

    def test_cwd(self, fake_run):
        fake_run({
            ("lsof", "-a", "-p", "4242", "-d", "cwd", "-Fn"): (0, "p4242\nfcwd\nn/home/alice/app\n", ""),
        })
        assert LsofTools().query_attribute(4242, "cwd") == "/home/alice/app"

    def test_unknown_attribute(self):
        with pytest.raises(ValueError):
            LsofTools().query_attribute(1, "colour")

    def test_process_ports(self, fake_run):
        fake_run({
            ("lsof", "-a", "-p", "5151", "-i", "-P", "-n"): (0, LSOF_DESCRIPTOR_SAMPLE, ""),
        })
        assert LsofTools().process_ports(5151) == [3000, 9229]

    def test_process_without_sockets(self, fake_run):
        fake_run({("lsof", "-a", "-p", "5151", "-i", "-P", "-n"): (1, "", "")})
        assert LsofTools().process_ports(5151) == []


Addr = namedtuple("Addr", "ip port")
Conn = namedtuple("Conn", "fd family type laddr raddr status pid")


class FakeProcess:
    def __init__(self, pid):
        if pid != 4242:
            raise psutil.NoSuchProcess(pid)
        self.pid = pid

    def name(self):
        return "python"

    def username(self):
        return "alice"

    def cmdline(self):
        return ["python", "app.py"]

    def memory_info(self):
        return namedtuple("Mem", "rss vms")(204800 * 1024, 0)

    def create_time(self):
        return 0.0

    def cwd(self):
        raise psutil.AccessDenied(self.pid)

    def net_connections(self, kind="inet"):
        return [
            Conn(3, 2, 1, Addr("0.0.0.0", 8000), (), "LISTEN", 4242),
            Conn(4, 10, 1, Addr("::", 8000), (), "LISTEN", 4242),
            Conn(5, 2, 2, (), (), "NONE", 4242),
        ]


class TestPsutilTools:
    @pytest.fixture(autouse=True)
    def fake_psutil(self, monkeypatch):
        monkeypatch.setattr(tools_mod.psutil, "Process", FakeProcess)
        monkeypatch.setattr(
            tools_mod.psutil, "net_connections",
            lambda kind="inet": [
                Conn(7, 2, 1, Addr("10.0.0.2", 51000), Addr("1.1.1.1", 443), "ESTABLISHED", None),
                Conn(8, 2, 1, Addr("0.0.0.0", 8000), (), "LISTEN", 4242),
            ],
        )

    def test_find_port_owner(self):
        assert PsutilTools().find_port_owner(8000) == ("python", 4242)

    def test_no_owner(self):
        with pytest.raises(NoProcessFound):
            PsutilTools().find_port_owner(9999)

    def test_attributes(self):
        t = PsutilTools()
        assert t.query_attribute(4242, "user") == "alice"
        assert t.query_attribute(4242, "command") == "python app.py"
        assert t.query_attribute(4242, "rss") == "204800"

    def test_access_denied_becomes_tool_error(self):
        with pytest.raises(ToolError):
            PsutilTools().query_attribute(4242, "cwd")

    def test_dead_process(self):
        with pytest.raises(ToolError):
            PsutilTools().query_attribute(1, "name")

    def test_process_ports_deduplicated(self):
        assert PsutilTools().process_ports(4242) == [8000]


class TestGetTools:
    def test_explicit(self):
        assert isinstance(get_tools("lsof"), LsofTools)
        assert isinstance(get_tools("psutil"), PsutilTools)

    def test_auto_on_macos(self, monkeypatch):
        monkeypatch.setattr(tools_mod.sys, "platform", "darwin")
        assert isinstance(get_tools("auto"), LsofTools)

    def test_auto_on_linux(self, monkeypatch):
        monkeypatch.setattr(tools_mod.sys, "platform", "linux")
        assert isinstance(get_tools(), PsutilTools)

    def test_unknown(self):
        with pytest.raises(ValueError):
            get_tools("netstat")

import pytest

from nebterm import cli
from nebterm.client import OneClient
from nebterm.config import UserConfig
from tests.conftest import VM_POOL_XML, FakeTransport, rpc_failure, rpc_success

VM_XML = (
    "<VM><ID>1</ID><NAME>web1</NAME><TEMPLATE>"
    "<DISK><DISK_ID>0</DISK_ID><IMAGE>ubuntu</IMAGE><SIZE>10240</SIZE></DISK>"
    "</TEMPLATE></VM>"
)


@pytest.fixture
def fake_transport(monkeypatch, credentials):
    transport = FakeTransport()
    monkeypatch.setattr(cli, "build_client", lambda args: OneClient(credentials, transport))
    return transport


def test_resources(capsys):
    assert cli.main(["resources"]) == 0
    out = capsys.readouterr().out
    assert "one-vms" in out
    assert "Virtual Machines" in out


def test_list_renders_columns(fake_transport, capsys):
    fake_transport.responses.append(rpc_success(VM_POOL_XML))

    assert cli.main(["list", "one-vms"]) == 0

    out = capsys.readouterr().out.splitlines()
    assert out[0] == "one-vms"
    assert out[1].split()[:4] == ["ID", "NAME", "OWNER", "STATE"]
    assert "web1" in out[2] and "ACTIVE" in out[2] and "2.0 GB" in out[2]
    assert "10.0.0.5" in out[2]
    assert "POWEROFF" in out[3]
    assert fake_transport.closed


def test_list_with_filter(fake_transport, capsys):
    fake_transport.responses.append(rpc_success(VM_POOL_XML))
    assert cli.main(["list", "one-vms", "--filter", "DB"]) == 0
    out = capsys.readouterr().out
    assert "db1" in out
    assert "web1" not in out


def test_list_scoped_to_parent(fake_transport, capsys):
    fake_transport.responses.append(rpc_success(VM_XML))

    assert cli.main(["list", "one-vm-disks", "--parent", "one-vms:1"]) == 0

    _, body = fake_transport.requests[0]
    assert "<methodName>one.vm.info</methodName>" in body
    assert "<int>1</int>" in body
    out = capsys.readouterr().out
    assert out.splitlines()[0] == "one-vms:1 > one-vm-disks"
    assert "ubuntu" in out and "10.0 GB" in out


def test_list_bad_parent(fake_transport, capsys):
    assert cli.main(["list", "one-vm-disks", "--parent", "one-hosts:1"]) == 1
    assert "not a sub-resource" in capsys.readouterr().err


def test_list_remote_error(fake_transport, capsys):
    fake_transport.responses.append(rpc_failure("[one.vmpool.info] Not authorized"))
    assert cli.main(["list", "one-vms"]) == 1
    assert "Not authorized" in capsys.readouterr().err


def test_unknown_resource(capsys):
    assert cli.main(["list", "one-nothing"]) == 1
    assert "Unknown resource: one-nothing" in capsys.readouterr().err


def test_missing_credentials(capsys):
    assert cli.main(["list", "one-vms"]) == 1
    assert "No OpenNebula credentials found" in capsys.readouterr().err


def test_describe(fake_transport, capsys):
    fake_transport.responses.extend([rpc_success(VM_POOL_XML), rpc_success(VM_XML)])

    assert cli.main(["describe", "one-vms", "1"]) == 0

    assert '"NAME": "web1"' in capsys.readouterr().out
    assert "<methodName>one.vm.info</methodName>" in fake_transport.requests[1][1]


def test_describe_unknown_id(fake_transport, capsys):
    fake_transport.responses.append(rpc_success(VM_POOL_XML))
    assert cli.main(["describe", "one-vms", "99"]) == 1
    assert "No one-vms with id 99" in capsys.readouterr().err


def test_action_with_yes(fake_transport, capsys):
    fake_transport.responses.extend([
        rpc_success(VM_POOL_XML),
        rpc_success(1),
        rpc_success(VM_POOL_XML),
    ])

    assert cli.main(["action", "one-vms", "terminate", "1", "--yes"]) == 0

    body = fake_transport.requests[1][1]
    assert "<methodName>one.vm.action</methodName>" in body
    assert "<string>terminate</string>" in body
    assert "done" in capsys.readouterr().out


def test_action_declined(fake_transport, monkeypatch, capsys):
    fake_transport.responses.append(rpc_success(VM_POOL_XML))
    monkeypatch.setattr("builtins.input", lambda prompt: "n")

    assert cli.main(["action", "one-vms", "terminate", "1"]) == 0

    assert len(fake_transport.requests) == 1
    assert "Cancelled" in capsys.readouterr().out


def test_action_readonly(fake_transport, capsys):
    fake_transport.responses.append(rpc_success(VM_POOL_XML))
    assert cli.main(["--readonly", "action", "one-vms", "terminate", "1", "--yes"]) == 1
    assert "Read-only mode" in capsys.readouterr().err
    assert len(fake_transport.requests) == 1


def test_version(fake_transport, capsys):
    fake_transport.responses.append(rpc_success("6.8.0"))
    assert cli.main(["version"]) == 0
    assert "OpenNebula 6.8.0" in capsys.readouterr().out


def test_set_endpoint(capsys):
    assert cli.main(["set-endpoint", "http://saved:2633/RPC2"]) == 0
    assert UserConfig.load().endpoint == "http://saved:2633/RPC2"


def test_log_file_flag_before_command(tmp_path):
    args = cli.build_parser().parse_args(["--log-file", "resources"])
    assert args.command == "resources"
    assert cli.log_destination(args) == str(tmp_path / "config" / "nebterm" / "nebterm.log")
    assert (tmp_path / "config" / "nebterm").is_dir()


def test_log_path(tmp_path):
    target = str(tmp_path / "custom.log")
    args = cli.build_parser().parse_args(["--log-path", target, "resources"])
    assert cli.log_destination(args) == target


def test_logs_to_stderr_by_default():
    assert cli.log_destination(cli.build_parser().parse_args(["resources"])) is None

"""Tests for the inventory lister."""

from __future__ import annotations

import pytest

from vmgateway.errors import ErrorKind, InvocationFailure
from vmgateway.inventory.lister import list_vms, parse_vm_names


class TestParseVmNames:
    def test_root_and_blank_lines_dropped(self) -> None:
        assert parse_vm_names("/dc/vm/\n/dc/vm/web1\n/dc/vm/db1\n", "/dc/vm/") == ["web1", "db1"]

    def test_suffix_after_root(self) -> None:
        lines = ["/dc/vm/a", "/dc/vm/folder/b", "/dc/vm/ccc"]
        names = parse_vm_names("\n".join(lines), "/dc/vm/")
        assert names == [line[len("/dc/vm/"):] for line in lines]

    def test_short_lines_dropped(self) -> None:
        names = parse_vm_names("/dc\n/dc/vm/\n/dc/vm/x\n", "/dc/vm/")
        assert names == ["x"]

    def test_empty_output(self) -> None:
        assert parse_vm_names("", "/dc/vm/") == []

    def test_never_more_names_than_lines(self) -> None:
        output = "/r/\n/r/a\n\n/r/bb\n/r\n"
        assert len(parse_vm_names(output, "/r/")) <= len(output.split("\n"))


class TestListVms:
    def test_lists_under_root(self, fake_bridge, fake_govc) -> None:
        assert list_vms(fake_bridge, "/dc/vm/") == ["web1", "db1"]
        assert fake_govc.calls == [["ls", "/dc/vm/"]]

    def test_idempotent(self, fake_bridge) -> None:
        first = list_vms(fake_bridge, "/dc/vm/")
        assert list_vms(fake_bridge, "/dc/vm/") == first

    def test_failure_raises(self, fake_bridge, fake_govc) -> None:
        fake_govc.output = "govc: ServerFaultCode: Cannot complete login"
        fake_govc.exit_code = 1

        with pytest.raises(InvocationFailure) as exc_info:
            list_vms(fake_bridge, "/dc/vm/")

        err = exc_info.value
        assert err.exit_code == 1
        assert err.output == fake_govc.output
        assert str(err) == "govc: ServerFaultCode: Cannot complete login (1)"
        assert err.kind is ErrorKind.INVOCATION

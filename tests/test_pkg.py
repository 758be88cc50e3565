from __future__ import annotations

import pytest

from conftest import FakeRunner
from oda_installer.errors import CommandError
from oda_installer.lib.distro import DistroFamily
from oda_installer.lib.pkg import resolve_package_manager


def test_ubuntu_binding_uses_apt_get():
    b = resolve_package_manager(DistroFamily.UBUNTU)
    assert b.name == "apt-get"
    assert b.install_cmd == ("sudo", "apt-get", "install", "-y")
    assert b.update_cmd == ("sudo", "apt-get", "update")
    assert b.clean_cmd == ("sudo", "apt-get", "clean")


def test_redhat_binding_uses_dnf():
    b = resolve_package_manager(DistroFamily.REDHAT)
    assert b.name == "dnf"
    assert b.install_cmd == ("sudo", "dnf", "install", "-y")
    assert b.update_cmd == ("sudo", "dnf", "check-update")
    assert b.clean_cmd == ("sudo", "dnf", "clean", "all")


def test_family_can_be_given_as_string():
    assert resolve_package_manager("ubuntu").name == "apt-get"


def test_unmapped_family_is_a_logic_error():
    with pytest.raises(AssertionError):
        resolve_package_manager("arch")


def test_install_appends_packages_and_skips_empty_lists():
    runner = FakeRunner()
    b = resolve_package_manager(DistroFamily.UBUNTU)
    b.install(runner, [])
    b.install(runner, ["curl", "git"])
    assert runner.calls == [["sudo", "apt-get", "install", "-y", "curl", "git"]]


def test_dnf_check_update_with_pending_updates_is_not_a_failure():
    runner = FakeRunner(responses={"sudo dnf check-update": (100, "")})
    r = resolve_package_manager(DistroFamily.REDHAT).update(runner)
    assert r.returncode == 100


def test_apt_update_failure_propagates():
    runner = FakeRunner(responses={"sudo apt-get update": (100, "")})
    with pytest.raises(CommandError):
        resolve_package_manager(DistroFamily.UBUNTU).update(runner)


def test_pinned_package_spec_per_family():
    assert resolve_package_manager(DistroFamily.UBUNTU).pinned("tensorrt", "8.6.1") == "tensorrt=8.6.1*"
    assert resolve_package_manager(DistroFamily.REDHAT).pinned("tensorrt", "8.6.1") == "tensorrt-8.6.1*"

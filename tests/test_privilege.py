from pathlib import Path

import pytest
from pytest import MonkeyPatch

from conftest import FakeFlatpak, FakeYay
from shorinstall.lib import installer as installer_module
from shorinstall.lib.args import ShorinConfig
from shorinstall.lib.installer import AppInstaller
from shorinstall.lib.models import CatalogEntry, PackageSource, SelectionSet
from shorinstall.lib.privilege import TemporaryPrivilegeGrant


def test_grant_file_contents(tmp_path: Path) -> None:
	grant_file = tmp_path / 'sudoers.d' / '99_shorin_installer_apps'

	with TemporaryPrivilegeGrant('alice', grant_file) as grant:
		assert grant.active
		assert grant_file.read_text() == 'alice ALL=(ALL) NOPASSWD: ALL\n'
		assert grant_file.stat().st_mode & 0o777 == 0o440

	assert not grant_file.exists()
	assert not grant.active


def test_grant_removed_on_exception(tmp_path: Path) -> None:
	grant_file = tmp_path / '99_grant'

	with pytest.raises(RuntimeError):
		with TemporaryPrivilegeGrant('alice', grant_file):
			raise RuntimeError('yay crashed')

	assert not grant_file.exists()


def test_grant_removed_on_keyboard_interrupt(tmp_path: Path) -> None:
	grant_file = tmp_path / '99_grant'

	with pytest.raises(KeyboardInterrupt):
		with TemporaryPrivilegeGrant('alice', grant_file):
			raise KeyboardInterrupt

	assert not grant_file.exists()


@pytest.mark.parametrize('user', ['alice ALL=(ALL) ALL', 'bob\nroot', '', '../etc'])
def test_grant_rejects_invalid_usernames(tmp_path: Path, user: str) -> None:
	with pytest.raises(ValueError):
		TemporaryPrivilegeGrant(user, tmp_path / '99_grant')


def _installer(tmp_path: Path, yay: FakeYay) -> AppInstaller:
	config = ShorinConfig(retry_delay=0, sudoers_file=tmp_path / 'sudoers.d' / '99_shorin_installer_apps')
	app_installer = AppInstaller('tester', config)
	app_installer.yay = yay  # type: ignore[assignment]
	app_installer.flatpak = FakeFlatpak()  # type: ignore[assignment]
	yay.grant_file = config.sudoers_file
	return app_installer


def _selection() -> SelectionSet:
	return SelectionSet.from_entries([
		CatalogEntry(name='vim', source=PackageSource.Repo),
		CatalogEntry(name='paru-bin', source=PackageSource.AUR),
		CatalogEntry(name='yay-bin', source=PackageSource.AUR),
	])


def test_grant_lives_exactly_through_repo_and_aur(monkeypatch: MonkeyPatch, tmp_path: Path) -> None:
	monkeypatch.setattr(installer_module, 'is_installed', lambda name: False)
	yay = FakeYay()
	app_installer = _installer(tmp_path, yay)

	app_installer.install(_selection())

	assert yay.grant_seen == [True, True, True]
	assert not app_installer.config.sudoers_file.exists()


def test_grant_removed_after_cancellation(monkeypatch: MonkeyPatch, tmp_path: Path) -> None:
	monkeypatch.setattr(installer_module, 'is_installed', lambda name: False)
	yay = FakeYay()
	yay.interrupt = {'paru-bin'}
	app_installer = _installer(tmp_path, yay)

	app_installer.install(_selection())

	assert yay.grant_seen == [True, True, True]
	assert not app_installer.config.sudoers_file.exists()


def test_grant_removed_when_every_check_is_cancelled(monkeypatch: MonkeyPatch, tmp_path: Path) -> None:
	def cancel(name: str) -> bool:
		raise KeyboardInterrupt

	monkeypatch.setattr(installer_module, 'is_installed', cancel)
	app_installer = _installer(tmp_path, FakeYay())

	summary = app_installer.install(_selection())

	assert not app_installer.config.sudoers_file.exists()
	assert len(summary.outcomes) == 3
	assert summary.skipped == summary.outcomes


def test_grant_removed_when_a_stage_crashes(monkeypatch: MonkeyPatch, tmp_path: Path) -> None:
	def crash(name: str) -> bool:
		raise RuntimeError('pacman database is corrupt')

	monkeypatch.setattr(installer_module, 'is_installed', crash)
	app_installer = _installer(tmp_path, FakeYay())

	with pytest.raises(RuntimeError):
		app_installer.install(_selection())

	assert not app_installer.config.sudoers_file.exists()


def test_no_grant_for_flatpak_only(monkeypatch: MonkeyPatch, tmp_path: Path) -> None:
	grants: list[str] = []

	class RecordingGrant(TemporaryPrivilegeGrant):
		def __enter__(self) -> TemporaryPrivilegeGrant:
			grants.append(self.user)
			return super().__enter__()

	monkeypatch.setattr(installer_module, 'TemporaryPrivilegeGrant', RecordingGrant)
	app_installer = _installer(tmp_path, FakeYay())

	app_installer.install(SelectionSet.from_entries([CatalogEntry(name='org.videolan.VLC', source=PackageSource.Flatpak)]))

	assert grants == []

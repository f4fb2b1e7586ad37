from pathlib import Path

import pytest

from shorinstall.lib.exceptions import SysCallError
from shorinstall.lib.output import logger


@pytest.fixture(autouse=True)
def log_directory(tmp_path: Path) -> Path:
	log_dir = tmp_path / 'log'
	logger.set_directory(log_dir)
	return log_dir


@pytest.fixture(scope='session')
def catalog_fixture() -> Path:
	return Path(__file__).parent / 'data' / 'common-applist.txt'


@pytest.fixture(scope='session')
def empty_catalog_fixture() -> Path:
	return Path(__file__).parent / 'data' / 'empty-applist.txt'


@pytest.fixture(scope='session')
def config_fixture() -> Path:
	return Path(__file__).parent / 'data' / 'test_config.json'


@pytest.fixture(scope='session')
def steam_desktop_fixture() -> Path:
	return Path(__file__).parent / 'data' / 'steam.desktop'


@pytest.fixture(scope='session')
def passwd_fixture() -> Path:
	return Path(__file__).parent / 'data' / 'passwd'


class FakeYay:
	"""
	Stands in for yay, packages listed in `failing` fail every time, packages
	in `flaky` fail that many times before succeeding.
	"""

	def __init__(self, user: str = 'tester', failing: set[str] | None = None, flaky: dict[str, int] | None = None):
		self.user = user
		self.failing = failing or set()
		self.flaky = dict(flaky or {})
		self.batches: list[list[str]] = []
		self.calls: list[str] = []
		self.grant_seen: list[bool] = []
		self.grant_file: Path | None = None
		self.interrupt: set[str] = set()

	def _note_grant(self) -> None:
		if self.grant_file is not None:
			self.grant_seen.append(self.grant_file.exists())

	def sync_install(self, packages: list[str]) -> None:
		self._note_grant()
		self.batches.append(list(packages))

		if self.interrupt & set(packages):
			raise KeyboardInterrupt
		if self.failing & set(packages):
			raise SysCallError('yay -Syu exited with abnormal exit code [1]', 1)

	def install(self, package: str) -> None:
		self._note_grant()
		self.calls.append(package)

		if package in self.interrupt:
			raise KeyboardInterrupt
		if package in self.failing:
			raise SysCallError(f'yay -S {package} exited with abnormal exit code [1]', 1)
		if self.flaky.get(package, 0) > 0:
			self.flaky[package] -= 1
			raise SysCallError(f'yay -S {package} exited with abnormal exit code [1]', 1)


class FakeFlatpak:
	def __init__(self, installed: set[str] | None = None, failing: set[str] | None = None):
		self.installed = set(installed or set())
		self.failing = failing or set()
		self.calls: list[str] = []
		self.overrides: list[tuple[str, str, str]] = []

	def is_installed(self, application: str) -> bool:
		return application in self.installed

	def has_application(self, application: str) -> bool:
		return application in self.installed

	def install(self, application: str) -> None:
		self.calls.append(application)

		if application in self.failing:
			raise SysCallError(f'flatpak install {application} exited with abnormal exit code [1]', 1)

		self.installed.add(application)

	def override_env(self, application: str, key: str, value: str) -> None:
		self.overrides.append((application, key, value))


@pytest.fixture
def fake_yay() -> FakeYay:
	return FakeYay()


@pytest.fixture
def fake_flatpak() -> FakeFlatpak:
	return FakeFlatpak()

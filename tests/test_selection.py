import subprocess
from pathlib import Path

import pytest
from pytest import MonkeyPatch

from shorinstall.lib import selection
from shorinstall.lib.catalog import load_catalog
from shorinstall.lib.exceptions import RequirementError
from shorinstall.lib.models import CatalogEntry, PackageSource
from shorinstall.lib.selection import Decision, ask_decision, fzf_select, select_entries


@pytest.fixture
def entries(catalog_fixture: Path) -> list[CatalogEntry]:
	return load_catalog(catalog_fixture)


def _answer(monkeypatch: MonkeyPatch, answer: str | None) -> None:
	monkeypatch.setattr(selection, 'prompt_with_timeout', lambda text, timeout: answer)


def _fzf_must_not_run(entries: list[CatalogEntry]) -> list[CatalogEntry]:
	raise AssertionError('fzf should not have been started')


@pytest.mark.parametrize(
	'answer, decision',
	[
		(None, Decision.Timeout),
		('', Decision.Choose),
		('y', Decision.Choose),
		('Y', Decision.Choose),
		('yes', Decision.Choose),
		('n', Decision.Decline),
		('N', Decision.Decline),
	],
)
def test_ask_decision(monkeypatch: MonkeyPatch, answer: str | None, decision: Decision) -> None:
	_answer(monkeypatch, answer)

	assert ask_decision(60) == decision


def test_timeout_selects_everything(monkeypatch: MonkeyPatch, entries: list[CatalogEntry]) -> None:
	_answer(monkeypatch, None)
	monkeypatch.setattr(selection, 'fzf_select', _fzf_must_not_run)

	result = select_entries(entries, timeout=60)

	assert result is not None
	assert len(result) == 5


def test_silent_selects_everything(monkeypatch: MonkeyPatch, entries: list[CatalogEntry]) -> None:
	monkeypatch.setattr(selection, 'prompt_with_timeout', lambda text, timeout: pytest.fail('prompted in silent mode'))
	monkeypatch.setattr(selection, 'fzf_select', _fzf_must_not_run)

	result = select_entries(entries, silent=True)

	assert result is not None
	assert len(result) == 5


def test_decline_skips_installation(monkeypatch: MonkeyPatch, entries: list[CatalogEntry]) -> None:
	_answer(monkeypatch, 'n')
	monkeypatch.setattr(selection, 'fzf_select', _fzf_must_not_run)

	assert select_entries(entries) is None


def test_accept_uses_fzf_selection(monkeypatch: MonkeyPatch, entries: list[CatalogEntry]) -> None:
	_answer(monkeypatch, '')
	monkeypatch.setattr(selection, 'fzf_select', lambda e: [e[0], e[2]])

	result = select_entries(entries)

	assert result is not None
	assert [e.name for e in result.repo] == ['firefox']
	assert [e.name for e in result.flatpak] == ['org.videolan.VLC']
	assert result.aur == []


def test_empty_fzf_selection_skips_installation(monkeypatch: MonkeyPatch, entries: list[CatalogEntry]) -> None:
	_answer(monkeypatch, 'y')
	monkeypatch.setattr(selection, 'fzf_select', lambda e: [])

	assert select_entries(entries) is None


def test_fzf_output_is_mapped_back_to_entries(monkeypatch: MonkeyPatch, entries: list[CatalogEntry]) -> None:
	captured: dict[str, bytes | None] = {}

	def fake_run(cmd: list[str], input_data: bytes | None = None) -> subprocess.CompletedProcess[bytes]:
		captured['input'] = input_data
		stdout = b'vim\t# Text editor\nAUR:some-pkg\t# From the AUR\n'
		return subprocess.CompletedProcess(cmd, 0, stdout=stdout)

	monkeypatch.setattr(selection, 'run_interactive', fake_run)

	chosen = fzf_select(entries)

	assert chosen == [
		CatalogEntry(name='vim', source=PackageSource.Repo, comment='Text editor'),
		CatalogEntry(name='some-pkg', source=PackageSource.AUR, comment='From the AUR'),
	]
	assert captured['input'] is not None
	assert b'flatpak:org.videolan.VLC\t# Media player' in captured['input']


@pytest.mark.parametrize('returncode', [1, 130])
def test_aborted_fzf_selects_nothing(monkeypatch: MonkeyPatch, entries: list[CatalogEntry], returncode: int) -> None:
	monkeypatch.setattr(
		selection,
		'run_interactive',
		lambda cmd, input_data=None: subprocess.CompletedProcess(cmd, returncode, stdout=b''),
	)

	assert fzf_select(entries) == []


def test_missing_fzf_is_a_requirement_error(monkeypatch: MonkeyPatch, entries: list[CatalogEntry]) -> None:
	def missing(cmd: list[str], input_data: bytes | None = None) -> subprocess.CompletedProcess[bytes]:
		raise FileNotFoundError('fzf')

	monkeypatch.setattr(selection, 'run_interactive', missing)

	with pytest.raises(RequirementError):
		fzf_select(entries)


def test_ensure_fzf_installs_when_missing(monkeypatch: MonkeyPatch) -> None:
	installed: list[str] = []

	monkeypatch.setattr(selection, 'has_binary', lambda name: False)
	monkeypatch.setattr(selection.Pacman, 'install', staticmethod(lambda packages: installed.append(packages)))

	selection.ensure_fzf()

	assert installed == ['fzf']


def test_ensure_fzf_noop_when_present(monkeypatch: MonkeyPatch) -> None:
	monkeypatch.setattr(selection, 'has_binary', lambda name: True)
	monkeypatch.setattr(selection.Pacman, 'install', staticmethod(lambda packages: pytest.fail('fzf reinstalled')))

	selection.ensure_fzf()

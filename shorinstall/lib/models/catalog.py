from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, field_validator


class PackageSource(Enum):
	Repo = 'repo'
	AUR = 'aur'
	Flatpak = 'flatpak'

	@property
	def prefix(self) -> str | None:
		"""The literal catalog prefix that selects this source."""
		match self:
			case PackageSource.Flatpak:
				return 'flatpak:'
			case PackageSource.AUR:
				return 'AUR:'
			case PackageSource.Repo:
				return None

	@classmethod
	def classify(cls, token: str) -> tuple['PackageSource', str]:
		for source in (cls.Flatpak, cls.AUR):
			if source.prefix and token.startswith(source.prefix):
				return source, token.removeprefix(source.prefix).strip()

		return cls.Repo, token


class CatalogEntry(BaseModel):
	model_config = ConfigDict(frozen=True)

	name: str
	source: PackageSource
	comment: str | None = None

	@field_validator('name')
	@classmethod
	def _name_not_empty(cls, value: str) -> str:
		if not value.strip():
			raise ValueError('Catalog entry has an empty package name')
		return value

	@property
	def label(self) -> str:
		return f'{self.source.value}:{self.name}'

	def catalog_line(self) -> str:
		"""
		The entry as it appears in the catalog, with its prefix and
		a tab separated comment, which is what fzf is fed with.
		"""
		token = f'{self.source.prefix or ""}{self.name}'
		if self.comment:
			return f'{token}\t# {self.comment}'
		return token


@dataclass
class SelectionSet:
	repo: list[CatalogEntry] = field(default_factory=list)
	aur: list[CatalogEntry] = field(default_factory=list)
	flatpak: list[CatalogEntry] = field(default_factory=list)

	@classmethod
	def from_entries(cls, entries: list[CatalogEntry]) -> Self:
		selection = cls()
		seen: set[tuple[PackageSource, str]] = set()

		for entry in entries:
			if (entry.source, entry.name) in seen:
				continue

			seen.add((entry.source, entry.name))
			selection.partition(entry.source).append(entry)

		return selection

	def partition(self, source: PackageSource) -> list[CatalogEntry]:
		match source:
			case PackageSource.Repo:
				return self.repo
			case PackageSource.AUR:
				return self.aur
			case PackageSource.Flatpak:
				return self.flatpak

	def needs_privileges(self) -> bool:
		return bool(self.repo or self.aur)

	def __len__(self) -> int:
		return len(self.repo) + len(self.aur) + len(self.flatpak)


class InstallResult(Enum):
	Installed = 'installed'
	AlreadyPresent = 'already present'
	Skipped = 'skipped'
	Failed = 'failed'


class InstallOutcome(BaseModel):
	model_config = ConfigDict(frozen=True)

	entry: CatalogEntry
	result: InstallResult
	attempts: int = 0

	def table_data(self) -> dict[str, Any]:
		return {
			'source': self.entry.source.value,
			'package': self.entry.name,
			'result': self.result.value,
			'attempts': self.attempts,
		}


@dataclass
class InstallSummary:
	outcomes: list[InstallOutcome] = field(default_factory=list)

	def record(self, entry: CatalogEntry, result: InstallResult, attempts: int = 0) -> InstallOutcome:
		outcome = InstallOutcome(entry=entry, result=result, attempts=attempts)
		self.outcomes.append(outcome)
		return outcome

	def merge(self, other: 'InstallSummary') -> 'InstallSummary':
		return InstallSummary(outcomes=self.outcomes + other.outcomes)

	def _with_result(self, result: InstallResult) -> list[InstallOutcome]:
		return [o for o in self.outcomes if o.result == result]

	@property
	def failed(self) -> list[InstallOutcome]:
		return self._with_result(InstallResult.Failed)

	@property
	def installed(self) -> list[InstallOutcome]:
		return self._with_result(InstallResult.Installed)

	@property
	def already_present(self) -> list[InstallOutcome]:
		return self._with_result(InstallResult.AlreadyPresent)

	@property
	def skipped(self) -> list[InstallOutcome]:
		return self._with_result(InstallResult.Skipped)

	def outcome_for(self, name: str) -> InstallOutcome | None:
		for outcome in self.outcomes:
			if outcome.entry.name == name:
				return outcome
		return None

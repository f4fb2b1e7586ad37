import time

from .args import ShorinConfig
from .exceptions import RequirementError, SysCallError
from .models.catalog import CatalogEntry, InstallResult, InstallSummary, SelectionSet
from .output import error, info, log, section, success, warn
from .packages import Flatpak, Yay, is_installed
from .privilege import TemporaryPrivilegeGrant

_INSTALL_ERRORS = (SysCallError, RequirementError)


def _cancelled(entry: CatalogEntry) -> None:
	warn(f'>>> Operation cancelled by user (Ctrl+C). Skipping {entry.name}...')


class AppInstaller:
	"""
	Installs a SelectionSet in three stages: official repositories as one
	batch, AUR packages one by one with retries and Flatpak applications
	one by one. Each stage returns its own InstallSummary and a failing
	stage never stops the ones after it.
	"""

	def __init__(self, target_user: str, config: ShorinConfig | None = None):
		self.target_user = target_user
		self.config = config or ShorinConfig()

		self.yay = Yay(target_user)
		self.flatpak = Flatpak(self.config.flatpak_remote)

	@property
	def max_attempts(self) -> int:
		return self.config.aur_retries + 1

	def install(self, selection: SelectionSet) -> InstallSummary:
		summary = InstallSummary()

		info(f'Scheduled: Repo: {len(selection.repo)}, AUR: {len(selection.aur)}, Flatpak: {len(selection.flatpak)}')

		if selection.needs_privileges():
			with TemporaryPrivilegeGrant(self.target_user, self.config.sudoers_file):
				summary = summary.merge(self.install_repo(selection.repo))
				summary = summary.merge(self.install_aur(selection.aur))

		summary = summary.merge(self.install_flatpak(selection.flatpak))

		return summary

	def install_repo(self, entries: list[CatalogEntry]) -> InstallSummary:
		summary = InstallSummary()

		if not entries:
			return summary

		section('Step 1/3', 'Official Repository Packages (Batch)')

		queue: list[CatalogEntry] = []
		for entry in entries:
			try:
				present = is_installed(entry.name)
			except KeyboardInterrupt:
				_cancelled(entry)
				summary.record(entry, InstallResult.Skipped)
				continue

			if present:
				log(f"Skipping '{entry.name}' (Already installed).")
				summary.record(entry, InstallResult.AlreadyPresent)
			else:
				queue.append(entry)

		if not queue:
			log('All Repo packages are already installed.')
			return summary

		info(f'Installing: {len(queue)} packages via Pacman/Yay')

		try:
			self.yay.sync_install([entry.name for entry in queue])
		except KeyboardInterrupt:
			warn('>>> Operation cancelled by user (Ctrl+C). Skipping the repository batch...')
			for entry in queue:
				summary.record(entry, InstallResult.Skipped, attempts=1)
			return summary
		except _INSTALL_ERRORS as err:
			# the aggregate exit status does not say which package broke, flag the whole batch
			error(f'Batch installation failed. Some repo packages might be missing: {err}')
			for entry in queue:
				summary.record(entry, InstallResult.Failed, attempts=1)
			return summary

		success('Repo batch installation completed.')
		for entry in queue:
			summary.record(entry, InstallResult.Installed, attempts=1)

		return summary

	def install_aur(self, entries: list[CatalogEntry]) -> InstallSummary:
		summary = InstallSummary()

		if not entries:
			return summary

		section('Step 2/3', 'AUR Packages (Sequential + Retry)')

		for entry in entries:
			attempts = 0

			try:
				if is_installed(entry.name):
					log(f"Skipping '{entry.name}' (Already installed).")
					summary.record(entry, InstallResult.AlreadyPresent)
					continue

				log(f'Installing AUR: {entry.name} ...')
				result = InstallResult.Failed

				while attempts < self.max_attempts:
					if attempts > 0:
						warn(f"Retry {attempts}/{self.max_attempts - 1} for '{entry.name}' in {self.config.retry_delay:g} seconds...")
						time.sleep(self.config.retry_delay)

					attempts += 1

					try:
						self.yay.install(entry.name)
					except _INSTALL_ERRORS as err:
						warn(f'Attempt {attempts} failed for {entry.name}: {err}')
						continue

					success(f'Installed {entry.name}')
					result = InstallResult.Installed
					break

				if result == InstallResult.Failed:
					error(f'Failed to install {entry.name} after {attempts} attempts.')

				summary.record(entry, result, attempts=attempts)
			except KeyboardInterrupt:
				_cancelled(entry)
				summary.record(entry, InstallResult.Skipped, attempts=attempts)

		return summary

	def install_flatpak(self, entries: list[CatalogEntry]) -> InstallSummary:
		summary = InstallSummary()

		if not entries:
			return summary

		section('Step 3/3', 'Flatpak Packages (Individual)')

		for index, entry in enumerate(entries):
			try:
				present = self.flatpak.is_installed(entry.name)
			except RequirementError as err:
				error(f'Flatpak is not available, skipping {len(entries) - index} application(s): {err}')
				for remaining in entries[index:]:
					summary.record(remaining, InstallResult.Failed, attempts=0)
				break
			except KeyboardInterrupt:
				_cancelled(entry)
				summary.record(entry, InstallResult.Skipped, attempts=1)
				continue

			try:
				if present:
					log(f"Skipping '{entry.name}' (Already installed).")
					summary.record(entry, InstallResult.AlreadyPresent)
					continue

				log(f'Installing Flatpak: {entry.name} ...')

				try:
					self.flatpak.install(entry.name)
				except _INSTALL_ERRORS as err:
					error(f'Failed to install: {entry.name} ({err})')
					summary.record(entry, InstallResult.Failed, attempts=1)
					continue

				success(f'Installed {entry.name}')
				summary.record(entry, InstallResult.Installed, attempts=1)
			except KeyboardInterrupt:
				_cancelled(entry)
				summary.record(entry, InstallResult.Skipped, attempts=1)

		return summary

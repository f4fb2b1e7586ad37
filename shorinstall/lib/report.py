import subprocess
from datetime import datetime
from pathlib import Path

from .general import chown, run, run_as_user
from .models.catalog import InstallOutcome, InstallSummary
from .output import FormattedOutput, debug, info, success, warn

RULE = '=' * 56


class FailureReport:
	"""
	Append-only list of packages that could not be installed, kept in the
	target user's Documents folder so it survives the reboot after setup.
	"""

	def __init__(self, home: Path, user: str, report_name: str = 'failed-applications.txt'):
		self.home = home
		self.user = user
		self.report_name = report_name

	@property
	def directory(self) -> Path:
		return self.home / 'Documents'

	@property
	def path(self) -> Path:
		return self.directory / self.report_name

	def _ensure_directory(self) -> None:
		if self.directory.is_dir():
			return

		# created as the user so the folder does not end up owned by root
		try:
			run(run_as_user(self.user, ['mkdir', '-p', str(self.directory)]))
		except (subprocess.CalledProcessError, FileNotFoundError) as err:
			debug(f'Could not create {self.directory} as {self.user}: {err}')

		self.directory.mkdir(parents=True, exist_ok=True)

	@staticmethod
	def format_section(failures: list[InstallOutcome], when: datetime) -> str:
		lines = [
			'',
			RULE,
			f' Installation Failure Report - {when.strftime("%Y-%m-%d %H:%M:%S %Z").strip()}',
			RULE,
		]
		lines += [outcome.entry.label for outcome in failures]
		return '\n'.join(lines) + '\n'

	def write(self, failures: list[InstallOutcome], when: datetime | None = None) -> Path:
		when = when or datetime.now().astimezone()

		self._ensure_directory()

		with self.path.open('a', encoding='utf-8') as report:
			report.write(self.format_section(failures, when))

		try:
			chown(self.path, self.user)
		except (subprocess.CalledProcessError, FileNotFoundError) as err:
			warn(f'Could not hand {self.path} over to {self.user}: {err}')

		return self.path


def report_outcomes(summary: InstallSummary, report: FailureReport) -> Path | None:
	"""
	Logs the outcome table and, when something failed, appends the failures
	to the report. Returns the report path if it was written.
	"""
	if summary.outcomes:
		debug('Installation outcomes:\n' + FormattedOutput.as_table(summary.outcomes, capitalize=True))

	if not summary.failed:
		success('All scheduled applications processed successfully.')
		return None

	path = report.write(summary.failed)

	info('')
	warn(f'{len(summary.failed)} application(s) failed to install.')
	warn('A report has been saved to:')
	info(f'   {path}')

	return path

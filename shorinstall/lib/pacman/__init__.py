import time
from pathlib import Path

from ..exceptions import RequirementError
from ..general import SysCommand
from ..output import error, info, warn

PACMAN_DB_LOCK = Path('/var/lib/pacman/db.lck')


class Pacman:
	@staticmethod
	def run(args: str, default_cmd: str = 'pacman', peek_output: bool = False) -> SysCommand:
		"""
		A centralized function to call `pacman` from.
		It also protects us from colliding with other running pacman sessions.
		The grace period is set to 10 minutes before giving up on the lock.
		"""
		if PACMAN_DB_LOCK.exists():
			warn('Pacman is already running, waiting maximum 10 minutes for it to terminate.')

		started = time.time()
		while PACMAN_DB_LOCK.exists():
			time.sleep(0.25)

			if time.time() - started > (60 * 10):
				error('Pre-existing pacman lock never exited. Please clean up any existing pacman sessions first.')
				raise RequirementError(f'Pacman database is locked: {PACMAN_DB_LOCK}')

		return SysCommand(f'{default_cmd} {args}', peek_output=peek_output)

	@staticmethod
	def install(packages: str | list[str]) -> None:
		if isinstance(packages, str):
			packages = [packages]

		info(f'Installing packages: {packages}')
		Pacman.run(f'-S --noconfirm --needed {" ".join(packages)}')


__all__ = [
	'Pacman',
]

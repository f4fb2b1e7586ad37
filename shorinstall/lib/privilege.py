import re
from pathlib import Path
from types import TracebackType

from .output import debug, error, log

DEFAULT_GRANT_FILE = Path('/etc/sudoers.d/99_shorin_installer_apps')


class TemporaryPrivilegeGrant:
	"""
	Passwordless sudo for one account, for as long as the context is open.

	yay builds as the target user and calls sudo pacman for the actual
	install, which would otherwise stop and ask for a password. The rule
	file is removed on every way out of the context, KeyboardInterrupt included.
	"""

	def __init__(self, user: str, path: Path = DEFAULT_GRANT_FILE):
		if not re.fullmatch(r'[A-Za-z_][A-Za-z0-9._-]*\$?', user):
			raise ValueError(f'Refusing to grant privileges to invalid username: {user!r}')

		self.user = user
		self.path = path
		self.active = False

	def __enter__(self) -> 'TemporaryPrivilegeGrant':
		log('Configuring temporary NOPASSWD for installation...')

		self.path.parent.mkdir(parents=True, exist_ok=True)

		try:
			self.path.write_text(f'{self.user} ALL=(ALL) NOPASSWD: ALL\n')
			self.path.chmod(0o440)
		except BaseException:
			self.path.unlink(missing_ok=True)
			raise

		self.active = True
		return self

	def __exit__(self, exc_type: type[BaseException] | None, exc_value: BaseException | None, traceback: TracebackType | None) -> None:
		self.revoke()

		if exc_type is not None and exc_type is not KeyboardInterrupt:
			error(str(exc_value), 'The error above occurred while the temporary NOPASSWD rule was active')

	def revoke(self) -> None:
		if self.path.exists():
			log('Revoking temporary NOPASSWD...')
			self.path.unlink()
		else:
			debug(f'Temporary sudoers rule already gone: {self.path}')

		self.active = False

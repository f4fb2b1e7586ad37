from ..general import SysCommand, run_as_user
from ..output import debug

# keep yay from stopping for diff and clean-build menus
_NON_INTERACTIVE = ['--noconfirm', '--needed', '--answerdiff=None', '--answerclean=None']


class Yay:
	"""
	yay refuses to run as root, so every invocation is wrapped in
	runuser for the target account. The account needs passwordless
	sudo for the pacman step, see TemporaryPrivilegeGrant.
	"""

	def __init__(self, user: str, binary: str = 'yay'):
		self.user = user
		self.binary = binary

	def _command(self, *args: str) -> list[str]:
		return run_as_user(self.user, [self.binary, *args])

	def sync_install(self, packages: list[str]) -> SysCommand:
		cmd = self._command('-Syu', *_NON_INTERACTIVE, *packages)
		debug(f'Batch installing {len(packages)} packages as {self.user}')
		return SysCommand(cmd, peek_output=True)

	def install(self, package: str) -> SysCommand:
		cmd = self._command('-S', *_NON_INTERACTIVE, package)
		return SysCommand(cmd, peek_output=True)

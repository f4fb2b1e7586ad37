import subprocess

from ..exceptions import SysCallError
from ..general import SysCommand, run
from ..models.packages import FlatpakRef
from ..output import debug


class Flatpak:
	def __init__(self, remote: str = 'flathub', binary: str = 'flatpak'):
		self.remote = remote
		self.binary = binary

	def is_installed(self, application: str) -> bool:
		try:
			SysCommand([self.binary, 'info', application])
		except SysCallError:
			return False
		return True

	def list_installed(self) -> list[FlatpakRef]:
		# piped rather than through a pty, flatpak only emits tab separated columns when not on a terminal
		try:
			output = run([self.binary, 'list', '--columns=application,name,version,branch,origin'])
		except (subprocess.CalledProcessError, FileNotFoundError) as err:
			debug(f'Unable to list flatpak applications: {err}')
			return []

		return [FlatpakRef.from_columns(line) for line in output.stdout.decode().splitlines() if line.strip()]

	def has_application(self, application: str) -> bool:
		return any(ref.application == application for ref in self.list_installed())

	def install(self, application: str) -> SysCommand:
		return SysCommand([self.binary, 'install', '-y', self.remote, application], peek_output=True)

	def override_env(self, application: str, key: str, value: str) -> SysCommand:
		return SysCommand([self.binary, 'override', f'--env={key}={value}', application])

from .exceptions import SysCallError
from .general import SysCommand, has_binary
from .output import log, success, warn

DEFAULT_MARKER = 'Before Desktop Environments'


class Snapper:
	def __init__(self, config: str, binary: str = 'snapper'):
		self.config = config
		self.binary = binary

	def _run(self, *args: str) -> SysCommand:
		return SysCommand([self.binary, '-c', self.config, *args])

	def is_configured(self) -> bool:
		try:
			self._run('get-config')
		except SysCallError:
			return False
		return True

	def descriptions(self) -> list[str]:
		output = self._run('list', '--columns', 'description')
		return [line.decode().strip() for line in output]

	def has_snapshot(self, description: str) -> bool:
		return description in self.descriptions()

	def create(self, description: str) -> None:
		self._run('create', '--description', description)


def _checkpoint(snapper: Snapper, marker: str, required: bool) -> bool:
	if not snapper.is_configured():
		if required:
			warn(f"Snapper '{snapper.config}' config not configured. Skipping {snapper.config} snapshot.")
		return False

	try:
		if snapper.has_snapshot(marker):
			log(f"Snapshot '{marker}' already exists on [{snapper.config}].")
			return False

		log(f'Creating safety checkpoint on [{snapper.config}]...')
		snapper.create(marker)
	except SysCallError as err:
		warn(f'Failed to create {snapper.config} snapshot: {err}')
		return False

	success(f'{snapper.config.capitalize()} snapshot created.')
	return True


def create_checkpoint(marker: str = DEFAULT_MARKER) -> list[str]:
	"""
	Takes a snapper snapshot of root, and home when it has its own config,
	unless one with the same description already exists.
	Returns the configs a snapshot was created for.
	"""
	if not has_binary('snapper'):
		warn('Snapper tool not found. Skipping snapshot creation.')
		return []

	created = []

	for config, required in (('root', True), ('home', False)):
		if _checkpoint(Snapper(config), marker, required):
			created.append(config)

	return created

from functools import lru_cache

from ..exceptions import SysCallError
from ..models.packages import LocalPackage
from ..output import debug
from ..pacman import Pacman


def installed_package(package: str) -> LocalPackage | None:
	try:
		package_info = []
		for line in Pacman.run(f'-Q --info {package}'):
			package_info.append(line.decode().strip())

		return _parse_package_output(package_info)
	except SysCallError:
		debug(f'Package not installed: {package}')

	return None


def is_installed(package: str) -> bool:
	"""
	True when pacman knows the package locally, also for packages that
	came from the AUR since yay registers them in the local database.
	"""
	return installed_package(package) is not None


@lru_cache(maxsize=128)
def _normalize_key_name(key: str) -> str:
	return key.strip().lower().replace(' ', '_')


def _parse_package_output(package_meta: list[str]) -> LocalPackage:
	package = {}

	for line in package_meta:
		if ':' in line:
			key, value = line.split(':', 1)
			key = _normalize_key_name(key)
			package.setdefault(key, value.strip())

	return LocalPackage.model_validate(package)

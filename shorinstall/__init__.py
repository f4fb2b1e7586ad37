"""Arch Linux post-installation: common applications, snapshots and tweaks."""

import importlib
import os
import sys
import traceback

from .lib.args import ShorinConfig, ShorinConfigHandler
from .lib.catalog import load_catalog
from .lib.exceptions import CatalogUnavailable, RequirementError, SysCallError, TargetUserError
from .lib.general import SysCommand
from .lib.installer import AppInstaller
from .lib.models import CatalogEntry, InstallOutcome, InstallResult, InstallSummary, PackageSource, SelectionSet
from .lib.output import debug, error, info, log, logger, warn
from .lib.pacman import Pacman


def main(argv: list[str] | None = None) -> int:
	"""
	Runs one of the modules in shorinstall/scripts/, `apps` unless
	--script or the configuration file says otherwise.
	"""
	try:
		handler = ShorinConfigHandler(argv)
	except ValueError as err:
		warn(str(err))
		return 1

	config = handler.config

	if handler.args.debug:
		info(f'Configuration: {config.safe_json()}')
	else:
		debug(f'Configuration: {config.safe_json()}')

	if os.getuid() != 0:
		print('shorinstall requires root privileges to run. See --help for more.')
		return 1

	script = importlib.import_module(f'shorinstall.scripts.{config.script}')

	try:
		return script.run(config, handler.args)
	except TargetUserError as err:
		error(f'Unable to determine the target user: {err}')
		return 1


def run_as_a_module() -> None:
	rc = 0

	try:
		rc = main()
	except Exception as exc:
		error(''.join(traceback.format_exception(exc)))
		error(f'shorinstall experienced the above error. The log file is at {logger.path}')
		rc = 1

	sys.exit(rc)


__all__ = [
	'AppInstaller',
	'CatalogEntry',
	'CatalogUnavailable',
	'InstallOutcome',
	'InstallResult',
	'InstallSummary',
	'PackageSource',
	'Pacman',
	'RequirementError',
	'SelectionSet',
	'ShorinConfig',
	'SysCallError',
	'SysCommand',
	'TargetUserError',
	'info',
	'load_catalog',
	'log',
	'main',
	'run_as_a_module',
]

import argparse
import json
import os
from argparse import ArgumentParser
from dataclasses import dataclass
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any

from pydantic.dataclasses import dataclass as p_dataclass

from .catalog import catalog_filename
from .output import debug, logger, warn

SCRIPTS = ['apps', 'snapshot']


@p_dataclass
class Arguments:
	config: Path | None = None
	script: str | None = None
	catalog: Path | None = None
	user: str | None = None
	desktop: str | None = None
	silent: bool = False
	timeout: int | None = None
	skip_patch: bool = False
	debug: bool = False
	verbose: bool = False


@dataclass
class ShorinConfig:
	script: str = 'apps'
	target_user: str | None = None
	catalog: Path | None = None
	desktop: str | None = None
	report_name: str = 'failed-applications.txt'
	locale: str = 'zh_CN.UTF-8'
	flatpak_remote: str = 'flathub'
	aur_retries: int = 2
	retry_delay: float = 3
	prompt_timeout: int = 60
	sudoers_file: Path = Path('/etc/sudoers.d/99_shorin_installer_apps')
	snapshot_marker: str = 'Before Desktop Environments'
	patch_steam: bool = True

	def catalog_path(self, base: Path) -> Path:
		if self.catalog is not None:
			return self.catalog
		return base / catalog_filename(self.desktop)

	def validate(self) -> None:
		if self.script not in SCRIPTS:
			raise ValueError(f'Unknown script "{self.script}", expected one of: {", ".join(SCRIPTS)}')
		if self.aur_retries < 0:
			raise ValueError('aur_retries can not be negative')
		if self.retry_delay < 0:
			raise ValueError('retry_delay can not be negative')
		if self.prompt_timeout <= 0:
			raise ValueError('prompt_timeout has to be a positive number of seconds')
		if not self.report_name or '/' in self.report_name:
			raise ValueError(f'Invalid report_name: {self.report_name!r}')

	def safe_json(self) -> dict[str, Any]:
		return {
			'script': self.script,
			'target_user': self.target_user,
			'catalog': str(self.catalog) if self.catalog else None,
			'desktop': self.desktop,
			'report_name': self.report_name,
			'locale': self.locale,
			'flatpak_remote': self.flatpak_remote,
			'aur_retries': self.aur_retries,
			'retry_delay': self.retry_delay,
			'prompt_timeout': self.prompt_timeout,
			'sudoers_file': str(self.sudoers_file),
			'snapshot_marker': self.snapshot_marker,
			'patch_steam': self.patch_steam,
		}

	@classmethod
	def from_config(cls, args_config: dict[str, Any], args: Arguments) -> 'ShorinConfig':
		config = ShorinConfig()

		if script := args_config.get('script', None):
			config.script = script

		if target_user := args_config.get('target_user', None):
			config.target_user = target_user

		if catalog := args_config.get('catalog', None):
			config.catalog = Path(catalog)

		# DESKTOP_ENV is exported by the desktop installation phase
		config.desktop = args_config.get('desktop', os.environ.get('DESKTOP_ENV'))

		if report_name := args_config.get('report_name', None):
			config.report_name = report_name

		if locale := args_config.get('locale', None):
			config.locale = locale

		if remote := args_config.get('flatpak_remote', None):
			config.flatpak_remote = remote

		config.aur_retries = int(args_config.get('aur_retries', config.aur_retries))
		config.retry_delay = float(args_config.get('retry_delay', config.retry_delay))
		config.prompt_timeout = int(args_config.get('prompt_timeout', config.prompt_timeout))

		if sudoers_file := args_config.get('sudoers_file', None):
			config.sudoers_file = Path(sudoers_file)

		if marker := args_config.get('snapshot_marker', None):
			config.snapshot_marker = marker

		patch_steam = args_config.get('patch_steam', True)
		if not isinstance(patch_steam, bool):
			raise ValueError(f'patch_steam has to be true or false, got {patch_steam!r}')
		config.patch_steam = patch_steam

		# command line arguments take precedence over the configuration file
		if args.script:
			config.script = args.script
		if args.catalog:
			config.catalog = args.catalog
		if args.user:
			config.target_user = args.user
		if args.desktop:
			config.desktop = args.desktop
		if args.timeout is not None:
			config.prompt_timeout = args.timeout
		if args.skip_patch:
			config.patch_steam = False

		config.validate()
		return config


class ShorinConfigHandler:
	def __init__(self, argv: list[str] | None = None) -> None:
		self._parser: ArgumentParser = self._define_arguments()
		self._args: Arguments = self._parse_args(argv)

		config = self._parse_config()

		self._config = ShorinConfig.from_config(config, self._args)

	@property
	def config(self) -> ShorinConfig:
		return self._config

	@property
	def args(self) -> Arguments:
		return self._args

	def print_help(self) -> None:
		self._parser.print_help()

	@staticmethod
	def _get_version() -> str:
		try:
			return version('shorinstall')
		except PackageNotFoundError:
			return 'shorinstall version not found'

	def _define_arguments(self) -> ArgumentParser:
		parser = ArgumentParser(prog='shorinstall', formatter_class=argparse.ArgumentDefaultsHelpFormatter)
		parser.add_argument(
			'-v',
			'--version',
			action='version',
			version='%(prog)s ' + self._get_version(),
		)
		parser.add_argument(
			'--config',
			type=Path,
			nargs='?',
			default=None,
			help='JSON configuration file',
		)
		parser.add_argument(
			'--script',
			nargs='?',
			type=str,
			choices=SCRIPTS,
			default=None,
			help='Module to run, applications or the pre-desktop snapshot',
		)
		parser.add_argument(
			'--list',
			dest='catalog',
			type=Path,
			nargs='?',
			default=None,
			help='Application catalog file, defaults to common-applist.txt next to the working directory',
		)
		parser.add_argument(
			'--user',
			type=str,
			nargs='?',
			default=None,
			help='Account the applications are installed for (defaults to the UID 1000 user)',
		)
		parser.add_argument(
			'--desktop',
			type=str,
			nargs='?',
			default=None,
			help='Desktop environment, "kde" selects the KDE catalog',
		)
		parser.add_argument(
			'--silent',
			action='store_true',
			default=False,
			help='Do not prompt, install the whole catalog',
		)
		parser.add_argument(
			'--timeout',
			type=int,
			nargs='?',
			default=None,
			help='Seconds to wait for an answer before installing everything',
		)
		parser.add_argument(
			'--skip-patch',
			action='store_true',
			default=False,
			help='Do not apply the Steam locale tweak',
		)
		parser.add_argument(
			'--debug',
			action='store_true',
			default=False,
			help='Adds debug info into the log',
		)
		parser.add_argument(
			'--verbose',
			action='store_true',
			default=False,
			help='Print debug messages to the terminal as well',
		)

		return parser

	def _parse_args(self, argv: list[str] | None) -> Arguments:
		argparse_args = vars(self._parser.parse_args(argv))
		args: Arguments = Arguments(**argparse_args)

		if args.verbose:
			logger.verbose = True

		return args

	def _parse_config(self) -> dict[str, Any]:
		if self._args.config is None:
			return {}

		if not self._args.config.is_file():
			raise ValueError(f'Configuration file does not exist: {self._args.config}')

		try:
			config: dict[str, Any] = json.loads(self._args.config.read_text())
		except json.JSONDecodeError as err:
			warn(f'Unable to parse configuration file {self._args.config}: {err}')
			raise ValueError(f'Invalid configuration file: {self._args.config}') from err

		debug(f'Loaded configuration from {self._args.config}')
		return config

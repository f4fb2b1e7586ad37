import logging
import os
import sys
import unicodedata
from collections.abc import Callable
from dataclasses import asdict, is_dataclass
from datetime import UTC, datetime
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any


@lru_cache(maxsize=128)
def _is_wide_character(char: str) -> bool:
	return unicodedata.east_asian_width(char) in 'FW'


def _display_width(text: str) -> int:
	# CJK package descriptions take two terminal cells per character
	return len(text) + sum(_is_wide_character(c) for c in text)


def _pad(text: str, width: int, right: bool = False) -> str:
	padding = ' ' * max(0, width - _display_width(text))
	return padding + text if right else text + padding


class FormattedOutput:
	@classmethod
	def _get_values(
		cls,
		o: Any,
		class_formatter: str | Callable | None = None,  # type: ignore[type-arg]
	) -> dict[str, Any]:
		if class_formatter:
			if callable(class_formatter):
				return class_formatter(o)
			elif hasattr(o, class_formatter) and callable(getattr(o, class_formatter)):
				return getattr(o, class_formatter)()

			raise ValueError('Unsupported formatting call')
		elif hasattr(o, 'table_data'):
			return o.table_data()
		elif hasattr(o, 'model_dump'):
			return o.model_dump()
		elif is_dataclass(o):
			return asdict(o)  # type: ignore[arg-type]
		else:
			return o.__dict__

	@classmethod
	def as_table(
		cls,
		obj: list[Any],
		class_formatter: str | Callable | None = None,  # type: ignore[type-arg]
		filter_list: list[str] = [],
		capitalize: bool = False,
	) -> str:
		"""
		Renders a list of records as a plain text table, one record per line.
		Only the keys in filter_list are shown when it is given.
		"""
		raw_data = [cls._get_values(o, class_formatter) for o in obj]

		column_width: dict[str, int] = {}
		for record in raw_data:
			for k, v in record.items():
				if not filter_list or k in filter_list:
					column_width[k] = max(column_width.get(k, 0), _display_width(str(v)), len(k))

		if not filter_list:
			filter_list = list(column_width.keys())

		headers = []
		for key in filter_list:
			title = key.replace('_', ' ')
			headers.append(_pad(title.capitalize() if capitalize else title, column_width.get(key, len(key))))

		output = ' | '.join(headers) + '\n'
		output += '-' * len(output) + '\n'

		for record in raw_data:
			cells = []
			for key in filter_list:
				width = column_width.get(key, len(key))
				value = record.get(key, '')
				numeric = isinstance(value, int | float) or (isinstance(value, str) and value.isnumeric())
				cells.append(_pad(str(value), width, right=numeric))

			output += ' | '.join(cells) + '\n'

		return output


class Journald:
	@staticmethod
	def log(message: str, level: int = logging.DEBUG) -> None:
		try:
			import systemd.journal  # type: ignore[import-not-found]
		except ModuleNotFoundError:
			return None

		log_adapter = logging.getLogger('shorinstall')
		log_fmt = logging.Formatter('[%(levelname)s]: %(message)s')
		log_ch = systemd.journal.JournalHandler()
		log_ch.setFormatter(log_fmt)
		log_adapter.addHandler(log_ch)
		log_adapter.setLevel(logging.DEBUG)

		log_adapter.log(level, message)


class Logger:
	def __init__(self, path: Path = Path('/var/log/shorinstall')) -> None:
		self._path = path
		self.verbose = False

	@property
	def path(self) -> Path:
		return self._path / 'install.log'

	@property
	def directory(self) -> Path:
		return self._path

	def set_directory(self, path: Path) -> None:
		self._path = path

	def _check_permissions(self) -> None:
		log_file = self.path

		try:
			self._path.mkdir(exist_ok=True, parents=True)
			log_file.touch(exist_ok=True)
		except PermissionError:
			# Unprivileged runs (--help, tests) log next to the caller instead
			self._path = Path('./').absolute()
			warn(f'Not enough permission to place log file at {log_file}, creating it in {self.path} instead')

	def log(self, level: int, content: str) -> None:
		self._check_permissions()

		with self.path.open('a') as f:
			f.write(f'[{_timestamp()}] - {logging.getLevelName(level)} - {content}\n')


logger = Logger()


def _supports_color() -> bool:
	"""
	Return True if the running system's terminal supports color,
	and False otherwise. Same heuristic as django.core.management.color.
	"""
	supported_platform = sys.platform != 'win32' or 'ANSICON' in os.environ
	is_a_tty = hasattr(sys.stdout, 'isatty') and sys.stdout.isatty()
	return supported_platform and is_a_tty


class Font(Enum):
	bold = '1'
	italic = '3'
	underscore = '4'
	blink = '5'
	reverse = '7'
	conceal = '8'


_COLORS = {
	'black': '0',
	'red': '1',
	'green': '2',
	'yellow': '3',
	'blue': '4',
	'magenta': '5',
	'cyan': '6',
	'white': '7',
	'gray': '8;5;246',
	'grey': '8;5;246',
	'darkgray': '8;5;240',
}


def _stylize_output(
	text: str,
	fg: str,
	bg: str | None,
	reset: bool,
	font: list[Font] = [],
) -> str:
	if text == '' and reset:
		return '\x1b[0m'

	code_list = [f'3{_COLORS[fg]}']

	if bg:
		code_list.append(f'4{_COLORS[bg]}')

	for o in font:
		code_list.append(o.value)

	ansi = ';'.join(code_list)

	return f'\033[{ansi}m{text}\033[0m'


def _timestamp() -> str:
	now = datetime.now(tz=UTC)
	return now.strftime('%Y-%m-%d %H:%M:%S')


def info(
	*msgs: str,
	level: int = logging.INFO,
	fg: str = 'white',
	bg: str | None = None,
	reset: bool = False,
	font: list[Font] = [],
) -> None:
	log(*msgs, level=level, fg=fg, bg=bg, reset=reset, font=font)


def success(
	*msgs: str,
	level: int = logging.INFO,
	fg: str = 'green',
	bg: str | None = None,
	reset: bool = False,
	font: list[Font] = [],
) -> None:
	log(*msgs, level=level, fg=fg, bg=bg, reset=reset, font=font)


def debug(
	*msgs: str,
	level: int = logging.DEBUG,
	fg: str = 'white',
	bg: str | None = None,
	reset: bool = False,
	font: list[Font] = [],
) -> None:
	log(*msgs, level=level, fg=fg, bg=bg, reset=reset, font=font)


def error(
	*msgs: str,
	level: int = logging.ERROR,
	fg: str = 'red',
	bg: str | None = None,
	reset: bool = False,
	font: list[Font] = [],
) -> None:
	log(*msgs, level=level, fg=fg, bg=bg, reset=reset, font=font)


def warn(
	*msgs: str,
	level: int = logging.WARNING,
	fg: str = 'yellow',
	bg: str | None = None,
	reset: bool = False,
	font: list[Font] = [],
) -> None:
	log(*msgs, level=level, fg=fg, bg=bg, reset=reset, font=font)


def section(phase: str, title: str) -> None:
	info('')
	info(f'>>> {phase}: {title}', fg='cyan', font=[Font.bold])


def log(
	*msgs: str,
	level: int = logging.INFO,
	fg: str = 'white',
	bg: str | None = None,
	reset: bool = False,
	font: list[Font] = [],
) -> None:
	text = ' '.join([str(x) for x in msgs])

	logger.log(level, text)

	if _supports_color():
		text = _stylize_output(text, fg, bg, reset, font)

	Journald.log(text, level=level)

	if level != logging.DEBUG or logger.verbose:
		print(text)
		sys.stdout.flush()

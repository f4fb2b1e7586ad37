import select
import sys
from enum import Enum

from .catalog import parse_line
from .exceptions import RequirementError, SysCallError
from .general import has_binary, run_interactive
from .models.catalog import CatalogEntry, SelectionSet
from .output import info, log, warn
from .pacman import Pacman

FZF_ABORTED = 130
FZF_NO_MATCH = 1

FZF_OPTIONS = [
	'--multi',
	'--layout=reverse',
	'--border',
	'--margin=1,2',
	'--prompt=Search App > ',
	'--pointer=>>',
	'--marker=* ',
	'--delimiter=\t',
	'--with-nth=1',
	'--bind=load:select-all',
	'--bind=ctrl-a:select-all,ctrl-d:deselect-all',
	'--info=inline',
	'--header=[TAB] TOGGLE | [ENTER] INSTALL | [CTRL-D] DE-ALL | [CTRL-A] SE-ALL',
	"--preview=echo {} | cut -f2 | sed 's/^# //'",
	'--preview-window=right:45%:wrap:border-left',
	'--color=dark',
	'--color=fg+:white,bg+:black',
	'--color=hl:blue,hl+:blue:bold',
	'--color=header:yellow:bold',
	'--color=info:magenta',
	'--color=prompt:cyan,pointer:cyan:bold,marker:green:bold',
	'--color=spinner:yellow',
]


class Decision(Enum):
	Choose = 'choose'
	Decline = 'decline'
	Timeout = 'timeout'


def prompt_with_timeout(text: str, timeout: float) -> str | None:
	"""
	Reads one line from stdin, giving up after timeout seconds.
	Returns None on timeout or when stdin is closed.
	"""
	sys.stdout.write(text)
	sys.stdout.flush()

	readable, _, _ = select.select([sys.stdin], [], [], timeout)
	if not readable:
		sys.stdout.write('\n')
		return None

	line = sys.stdin.readline()
	if not line:
		return None

	return line.strip()


def ask_decision(timeout: float) -> Decision:
	answer = prompt_with_timeout('   Please select [Y/n]: ', timeout)

	if answer is None:
		return Decision.Timeout

	if answer.lower() == 'n':
		return Decision.Decline

	return Decision.Choose


def ensure_fzf() -> None:
	if has_binary('fzf'):
		return

	info('Installing dependency: fzf...')
	Pacman.install('fzf')


def fzf_select(entries: list[CatalogEntry]) -> list[CatalogEntry]:
	"""
	Lets the operator pick entries with fzf, every entry starts out selected.
	Returns an empty list when nothing was picked or fzf was aborted.
	"""
	lines = {entry.catalog_line(): entry for entry in entries}
	input_data = '\n'.join(lines).encode()

	try:
		result = run_interactive(['fzf', *FZF_OPTIONS], input_data=input_data)
	except FileNotFoundError as err:
		raise RequirementError('Binary fzf does not exist.') from err

	if result.returncode in (FZF_NO_MATCH, FZF_ABORTED):
		return []

	if result.returncode != 0:
		raise SysCallError(f'fzf exited with abnormal exit code [{result.returncode}]', result.returncode)

	chosen = []
	for line in result.stdout.decode().splitlines():
		if entry := lines.get(line) or parse_line(line):
			chosen.append(entry)

	return chosen


def select_entries(
	entries: list[CatalogEntry],
	timeout: float = 60,
	silent: bool = False,
) -> SelectionSet | None:
	"""
	Returns the operator's selection, or None when the operator declined
	or deselected everything. Unattended runs (timeout or silent) get
	the whole catalog.
	"""
	if silent:
		log('Silent mode, installing all applications from the list.')
		return SelectionSet.from_entries(entries)

	info('>>> Do you want to install common applications?', fg='cyan')
	info('    [ENTER] = Select packages via FZF')
	info('    [N]     = Skip installation')
	warn(f'    [Timeout {int(timeout)}s] = Auto-install ALL default packages (No FZF)')

	decision = ask_decision(timeout)

	if decision == Decision.Timeout:
		warn(f'Timeout reached ({int(timeout)}s). Auto-installing ALL applications from list...')
		return SelectionSet.from_entries(entries)

	if decision == Decision.Decline:
		warn('User skipped application installation.')
		return None

	chosen = fzf_select(entries)

	if not chosen:
		log('Skipping application installation (User cancelled selection).')
		return None

	return SelectionSet.from_entries(chosen)

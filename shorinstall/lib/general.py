from __future__ import annotations

import os
import re
import shlex
import signal
import stat
import subprocess
import sys
import time
from collections.abc import Iterator
from pathlib import Path
from select import EPOLLHUP, EPOLLIN, epoll
from shutil import which
from types import TracebackType
from typing import override

from .exceptions import RequirementError, SysCallError
from .output import debug, error, logger

# https://stackoverflow.com/a/43627833/929999
_VT100_ESCAPE_REGEX_BYTES = rb'\x1B\[[?0-9;]*[a-zA-Z]'


def locate_binary(name: str) -> str:
	if path := which(name):
		return path
	raise RequirementError(f'Binary {name} does not exist.')


def has_binary(name: str) -> bool:
	return which(name) is not None


def clear_vt100_escape_codes(data: bytes) -> bytes:
	return re.sub(_VT100_ESCAPE_REGEX_BYTES, b'', data)


class SysCommandWorker:
	"""
	Runs a single command inside a pseudo terminal so that tools which
	draw progress bars (yay, flatpak) behave as if attended.
	Output is collected into a trace log and optionally echoed.
	"""

	def __init__(
		self,
		cmd: str | list[str],
		peek_output: bool | None = False,
		environment_vars: dict[str, str] | None = None,
		working_directory: str | None = './',
	):
		if isinstance(cmd, str):
			cmd = shlex.split(cmd)

		if cmd and not cmd[0].startswith(('/', './')):
			cmd[0] = locate_binary(cmd[0])

		self.cmd = cmd
		self.peek_output = peek_output
		# command output is parsed in a couple of places, keep it in the C locale
		self.environment_vars = {'LC_ALL': 'C'}
		if environment_vars:
			self.environment_vars.update(environment_vars)

		self.working_directory = working_directory

		self.exit_code: int | None = None
		self._trace_log = b''
		self._trace_log_pos = 0
		self.poll_object = epoll()
		self.child_fd: int | None = None
		self.pid: int = 0
		self.started: float | None = None
		self.ended: float | None = None

	def __iter__(self) -> Iterator[bytes]:
		last_line = self._trace_log.rfind(b'\n')
		lines = filter(None, self._trace_log[self._trace_log_pos:last_line].splitlines())
		for line in lines:
			yield clear_vt100_escape_codes(line) + b'\n'

		self._trace_log_pos = last_line

	@override
	def __str__(self) -> str:
		try:
			return self._trace_log.decode('utf-8')
		except UnicodeDecodeError:
			return str(self._trace_log)

	def __enter__(self) -> SysCommandWorker:
		return self

	def __exit__(self, exc_type: type[BaseException] | None, exc_value: BaseException | None, traceback: TracebackType | None) -> None:
		if self.child_fd:
			try:
				os.close(self.child_fd)
			except OSError:
				pass

		if self.peek_output:
			sys.stdout.write('\n')
			sys.stdout.flush()

		if exc_value is not None:
			debug(str(exc_value))

			if self.pid and self.ended is None:
				# the pty child sits in its own session and never sees our SIGINT
				try:
					os.kill(self.pid, signal.SIGTERM)
				except ProcessLookupError:
					pass
				self._reap()
			return

		if self.exit_code != 0:
			raise SysCallError(
				f'{self.cmd} exited with abnormal exit code [{self.exit_code}]: {str(self)[-500:]}',
				self.exit_code,
				worker_log=self._trace_log,
			)

	def is_alive(self) -> bool:
		self.poll()

		if self.started and self.ended is None:
			return True

		return False

	def make_sure_we_are_executing(self) -> bool:
		if not self.started:
			return self.execute()
		return True

	def peak(self, output: bytes) -> bool:
		if self.peek_output:
			try:
				text = output.decode('UTF-8')
			except UnicodeDecodeError:
				return False

			peak_logfile = logger.directory / 'cmd_output.txt'
			change_perm = not peak_logfile.exists()

			with peak_logfile.open('a') as peek_output_log:
				peek_output_log.write(text)

			if change_perm:
				peak_logfile.chmod(stat.S_IRUSR | stat.S_IWUSR | stat.S_IRGRP)

			sys.stdout.write(text)
			sys.stdout.flush()

		return True

	def poll(self) -> None:
		self.make_sure_we_are_executing()

		if self.child_fd and self.exit_code is None:
			got_output = False
			for _fileno, _event in self.poll_object.poll(0.1):
				try:
					output = os.read(self.child_fd, 8192)
					got_output = True
					self.peak(output)
					self._trace_log += output
				except OSError:
					self.ended = time.time()
					break

			if self.ended or (not got_output and not _pid_exists(self.pid)):
				self._reap()

	def _reap(self) -> None:
		self.ended = time.time()
		try:
			wait_status = os.waitpid(self.pid, 0)[1]
			self.exit_code = os.waitstatus_to_exitcode(wait_status)
		except ChildProcessError:
			self.exit_code = 1

	def execute(self) -> bool:
		import pty

		if (old_dir := os.getcwd()) != self.working_directory:
			os.chdir(str(self.working_directory))

		self.pid, self.child_fd = pty.fork()

		if not self.pid:
			_log_cmd(self.cmd)

			try:
				os.execve(self.cmd[0], list(self.cmd), {**os.environ, **self.environment_vars})
			except FileNotFoundError:
				error(f'{self.cmd[0]} does not exist.')
				os._exit(127)
		else:
			os.chdir(old_dir)

		self.started = time.time()
		self.poll_object.register(self.child_fd, EPOLLIN | EPOLLHUP)

		return True


class SysCommand:
	def __init__(
		self,
		cmd: str | list[str],
		peek_output: bool | None = False,
		environment_vars: dict[str, str] | None = None,
		working_directory: str | None = './',
	):
		self.cmd = cmd
		self.peek_output = peek_output
		self.environment_vars = environment_vars
		self.working_directory = working_directory

		self.session: SysCommandWorker | None = None
		self.create_session()

	def __iter__(self) -> Iterator[bytes]:
		if self.session:
			yield from self.session

	@override
	def __repr__(self) -> str:
		return self.decode('UTF-8', errors='backslashreplace') or ''

	def create_session(self) -> bool:
		"""
		Starts a SysCommandWorker and polls it until the process ends.
		A non-zero exit status surfaces as SysCallError when the worker closes.
		"""
		if self.session:
			return True

		with SysCommandWorker(
			self.cmd,
			peek_output=self.peek_output,
			environment_vars=self.environment_vars,
			working_directory=self.working_directory,
		) as session:
			self.session = session

			while not self.session.ended:
				self.session.poll()

		return True

	def decode(self, encoding: str = 'utf-8', errors: str = 'backslashreplace', strip: bool = True) -> str:
		if not self.session:
			raise ValueError('No session available to decode')

		val = self.session._trace_log.decode(encoding, errors=errors)

		if strip:
			return val.strip()
		return val

	@property
	def exit_code(self) -> int | None:
		if self.session:
			return self.session.exit_code
		return None


def _log_cmd(cmd: list[str]) -> None:
	history_logfile = logger.directory / 'cmd_history.txt'
	change_perm = not history_logfile.exists()

	try:
		with history_logfile.open('a') as cmd_log:
			cmd_log.write(f'{time.time()} {cmd}\n')

		if change_perm:
			history_logfile.chmod(stat.S_IRUSR | stat.S_IWUSR | stat.S_IRGRP)
	except (PermissionError, FileNotFoundError):
		# the history is best effort, the install log still has the command
		pass


def run(
	cmd: list[str],
	input_data: bytes | None = None,
) -> subprocess.CompletedProcess[bytes]:
	_log_cmd(cmd)

	return subprocess.run(
		cmd,
		input=input_data,
		stdout=subprocess.PIPE,
		stderr=subprocess.STDOUT,
		check=True,
	)


def run_as_user(user: str, cmd: list[str]) -> list[str]:
	return ['runuser', '-u', user, '--', *cmd]


def _pid_exists(pid: int) -> bool:
	try:
		return any(subprocess.check_output(['ps', '--no-headers', '-o', 'pid', '-p', str(pid)]).strip())
	except subprocess.CalledProcessError:
		return False


def chown(path: Path, user: str) -> None:
	run(['chown', f'{user}:{user}', str(path)])


def run_interactive(
	cmd: list[str],
	input_data: bytes | None = None,
) -> subprocess.CompletedProcess[bytes]:
	"""
	Like run(), but leaves stderr and the controlling terminal to the
	child so that full screen tools (fzf) can draw, and only captures stdout.
	"""
	_log_cmd(cmd)

	return subprocess.run(
		cmd,
		input=input_data,
		stdout=subprocess.PIPE,
		check=False,
	)

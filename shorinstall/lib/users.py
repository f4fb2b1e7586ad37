from pathlib import Path

from .exceptions import TargetUserError
from .output import info

PASSWD = Path('/etc/passwd')
FIRST_USER_UID = 1000


def detect_target_user(passwd: Path = PASSWD, uid: int = FIRST_USER_UID) -> str | None:
	if not passwd.is_file():
		return None

	for line in passwd.read_text().splitlines():
		fields = line.split(':')
		if len(fields) >= 3 and fields[2] == str(uid):
			return fields[0]

	return None


def home_directory(user: str, passwd: Path = PASSWD) -> Path:
	if passwd.is_file():
		for line in passwd.read_text().splitlines():
			fields = line.split(':')
			if len(fields) >= 6 and fields[0] == user and fields[5]:
				return Path(fields[5])

	return Path('/home') / user


def resolve_target_user(preset: str | None = None, passwd: Path = PASSWD, silent: bool = False) -> str:
	"""
	The account applications are installed for: the configured one, the
	first regular user, or whatever the operator types in.
	"""
	info('Identifying target user...')

	if preset:
		return preset

	if user := detect_target_user(passwd):
		return user

	if silent:
		raise TargetUserError('No user with UID 1000 found and no --user given')

	try:
		user = input('   Please enter the target username: ').strip()
	except EOFError:
		user = ''

	if not user:
		raise TargetUserError('No target user entered')

	return user

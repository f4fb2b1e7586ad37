import re
from pathlib import Path

from .exceptions import RequirementError, SysCallError
from .output import log, section, success, warn
from .packages import Flatpak

STEAM_DESKTOP_FILE = Path('/usr/share/applications/steam.desktop')
STEAM_FLATPAK_ID = 'com.valvesoftware.Steam'

# Exec=/usr/bin/steam %U and Exec=steam %U, anything else is left alone
_STEAM_EXEC = re.compile(r'^Exec=(/usr/bin/steam|steam)\b', re.MULTILINE)


def patch_desktop_file(path: Path, locale: str) -> bool:
	"""
	Prefixes the steam Exec lines of a launcher with `env LANG=<locale>`.
	Returns True when the file was changed, a patched file is left untouched.
	"""
	content = path.read_text(encoding='utf-8')

	if f'env LANG={locale}' in content:
		return False

	patched = _STEAM_EXEC.sub(lambda m: f'Exec=env LANG={locale} {m.group(1)}', content)

	if patched == content:
		return False

	path.write_text(patched, encoding='utf-8')
	return True


def apply_steam_locale_fix(
	locale: str,
	desktop_file: Path = STEAM_DESKTOP_FILE,
	flatpak: Flatpak | None = None,
) -> bool:
	section('Post-Install', 'Game Environment Tweaks')

	modified = False

	if desktop_file.is_file():
		log('Checking Native Steam...')
		try:
			if patch_desktop_file(desktop_file, locale):
				success('Patched Native Steam .desktop.')
				modified = True
			else:
				log('Native Steam already patched.')
		except OSError as err:
			warn(f'Could not patch {desktop_file}: {err}')

	flatpak = flatpak or Flatpak()

	if flatpak.has_application(STEAM_FLATPAK_ID):
		log('Checking Flatpak Steam...')
		try:
			flatpak.override_env(STEAM_FLATPAK_ID, 'LANG', locale)
			success('Applied Flatpak Steam override.')
			modified = True
		except (SysCallError, RequirementError) as err:
			warn(f'Could not apply the Flatpak Steam override: {err}')

	if not modified:
		log('Steam not found or already configured. Skipping fix.')

	return modified

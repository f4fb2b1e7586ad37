import re
from pathlib import Path

from .exceptions import CatalogUnavailable
from .models.catalog import CatalogEntry, PackageSource
from .output import debug

DEFAULT_CATALOG = 'common-applist.txt'
KDE_CATALOG = 'kde-common-applist.txt'

# `vim    # editor` and `vim\t# editor` are the same entry
_COMMENT_SEPARATOR = re.compile(r'\s+#')


def catalog_filename(desktop: str | None) -> str:
	if desktop and desktop.lower() == 'kde':
		return KDE_CATALOG
	return DEFAULT_CATALOG


def parse_line(line: str) -> CatalogEntry | None:
	line = line.replace('\r', '').strip()

	if not line or line.startswith('#'):
		return None

	line = _COMMENT_SEPARATOR.sub('\t#', line, count=1)

	comment: str | None = None
	if '\t#' in line:
		line, comment = line.split('\t#', 1)
		comment = comment.lstrip('#').strip() or None

	token = line.strip()
	if not token:
		return None

	source, name = PackageSource.classify(token)
	if not name:
		return None

	return CatalogEntry(name=name, source=source, comment=comment)


def parse_catalog(content: str) -> list[CatalogEntry]:
	entries = []

	for line in content.splitlines():
		if entry := parse_line(line):
			entries.append(entry)

	return entries


def load_catalog(path: Path) -> list[CatalogEntry]:
	"""
	Reads the application catalog. Raises CatalogUnavailable both when the
	file is missing and when it only holds comments and blank lines, the two
	cases are treated the same by callers.
	"""
	if not path.is_file():
		raise CatalogUnavailable(f'File {path.name} not found')

	entries = parse_catalog(path.read_text(encoding='utf-8'))

	if not entries:
		raise CatalogUnavailable(f'App list {path.name} is empty')

	debug(f'Loaded {len(entries)} entries from {path}')
	return entries

from pathlib import Path

from shorinstall.lib.args import Arguments, ShorinConfig
from shorinstall.lib.catalog import load_catalog
from shorinstall.lib.exceptions import CatalogUnavailable, RequirementError, SysCallError
from shorinstall.lib.installer import AppInstaller
from shorinstall.lib.output import info, log, section, warn
from shorinstall.lib.patcher import apply_steam_locale_fix
from shorinstall.lib.report import FailureReport, report_outcomes
from shorinstall.lib.selection import ensure_fzf, select_entries
from shorinstall.lib.users import home_directory, resolve_target_user


def run(config: ShorinConfig, args: Arguments, base: Path | None = None) -> int:
	section('Phase 5', 'Common Applications')

	user = resolve_target_user(config.target_user, silent=args.silent)
	info(f'Target: {user}')

	catalog = config.catalog_path(base or Path.cwd())

	try:
		entries = load_catalog(catalog)
	except CatalogUnavailable as err:
		warn(f'{err}. Skipping.')
		return 0

	info(f'Selected List: {catalog.name}')

	if not args.silent:
		try:
			ensure_fzf()
		except (SysCallError, RequirementError) as err:
			warn(f'Could not install fzf: {err}')

	try:
		selection = select_entries(entries, timeout=config.prompt_timeout, silent=args.silent)
	except (SysCallError, RequirementError) as err:
		warn(f'{err} Skipping application installation.')
		return 0

	if selection is None:
		return 0

	log('Processing selection...')
	summary = AppInstaller(user, config).install(selection)

	report_outcomes(summary, FailureReport(home_directory(user), user, config.report_name))

	if config.patch_steam:
		apply_steam_locale_fix(config.locale)

	log('Common applications stage completed.')
	return 0

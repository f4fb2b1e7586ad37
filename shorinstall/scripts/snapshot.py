from shorinstall.lib.args import Arguments, ShorinConfig
from shorinstall.lib.output import log, section
from shorinstall.lib.snapshot import create_checkpoint


def run(config: ShorinConfig, args: Arguments) -> int:
	section('Phase 3c', 'System Snapshot')

	log('Preparing to create restore point...')
	create_checkpoint(config.snapshot_marker)

	log('Snapshot stage completed.')
	return 0

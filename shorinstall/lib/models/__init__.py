from .catalog import (
	CatalogEntry,
	InstallOutcome,
	InstallResult,
	InstallSummary,
	PackageSource,
	SelectionSet,
)
from .packages import FlatpakRef, LocalPackage

__all__ = [
	'CatalogEntry',
	'FlatpakRef',
	'InstallOutcome',
	'InstallResult',
	'InstallSummary',
	'LocalPackage',
	'PackageSource',
	'SelectionSet',
]

from typing import override

from pydantic import BaseModel


class LocalPackage(BaseModel):
	name: str
	version: str
	description: str = ''
	architecture: str = ''
	url: str = ''
	licenses: str = ''
	groups: str = ''

	@override
	def __eq__(self, other: object) -> bool:
		if not isinstance(other, LocalPackage):
			return NotImplemented

		return self.name == other.name and self.version == other.version

	@override
	def __hash__(self) -> int:
		return hash((self.name, self.version))


class FlatpakRef(BaseModel):
	application: str
	name: str = ''
	version: str = ''
	branch: str = ''
	origin: str = ''

	@classmethod
	def from_columns(cls, line: str) -> 'FlatpakRef':
		# `flatpak list --columns=application,name,version,branch,origin` is tab separated
		fields = ['application', 'name', 'version', 'branch', 'origin']
		values = line.rstrip('\n').split('\t')
		return cls.model_validate({key: value.strip() for key, value in zip(fields, values)})

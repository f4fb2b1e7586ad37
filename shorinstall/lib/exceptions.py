class RequirementError(Exception):
	pass


class SysCallError(Exception):
	def __init__(self, message: str, exit_code: int | None = None, worker_log: bytes = b'') -> None:
		super().__init__(message)
		self.message = message
		self.exit_code = exit_code
		self.worker_log = worker_log


class CatalogUnavailable(Exception):
	"""
	Raised when the application catalog is missing or holds no usable entries.
	Callers treat this as "nothing to do" rather than a failure.
	"""


class TargetUserError(Exception):
	pass

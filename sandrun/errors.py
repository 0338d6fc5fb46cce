class SandrunError(Exception):
	exit_code = 1


class UsageError(SandrunError):
	pass


class PreconditionError(SandrunError):
	pass


class WorkspaceError(SandrunError):
	pass


class InstallError(SandrunError):
	pass


class ExecutableNotFoundError(SandrunError):
	def __init__(self, message: str, executable: str | None = None):
		super().__init__(message)
		self.executable = executable


class RelayWarning(SandrunError):
	pass


class TransportError(SandrunError):
	pass


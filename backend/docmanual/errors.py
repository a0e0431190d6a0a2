"""Domain failures raised by the manual service and the persistence layer.

Every `DomainError` carries a human readable message and the HTTP status the
API answers with. `StorageError` is not a `DomainError`: a broken store
fails the current request with a server error.
"""
from __future__ import annotations


class DomainError(Exception):
	status_code = 400

	def __init__(self, message: str) -> None:
		super().__init__(message)
		self.message = message


class NotFoundError(DomainError):
	status_code = 404


class ConflictError(DomainError):
	status_code = 409


class InUseError(ConflictError):
	"""A resource is still referenced and cannot be removed."""


class ForbiddenError(DomainError):
	status_code = 403


class AuthError(DomainError):
	status_code = 401


class ValidationError(DomainError):
	status_code = 422


class StorageError(RuntimeError):
	pass

"""
Errors raised by peerbump.

Everything derives from :class:`PeerbumpError`, which the CLI reports as
a one-line message plus exit code 1. Each subclass records the fields a
user needs to fix the problem (file, option, URL, package) both as
attributes and in the ``details`` mapping rendered by ``str()``.

An analysis run is never retried and never turns an error into a
"no update" result; the HTTP layer's transient-failure retries happen
before any of these are raised.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, MutableMapping, Optional

# Longest response body kept in ``details``.
MAX_BODY_PREVIEW = 200


def _present(**fields: Any) -> Dict[str, Any]:
    """Keep only the fields that were actually supplied."""
    return {key: value for key, value in fields.items() if value is not None}


def _preview(body: str) -> str:
    return body if len(body) <= MAX_BODY_PREVIEW else body[:MAX_BODY_PREVIEW] + "..."


class PeerbumpError(Exception):
    """Root of the peerbump error hierarchy.

    Args:
        message: What went wrong, for humans.
        details: Extra key/value context appended to ``str()``.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message: str = message
        self.details: MutableMapping[str, Any] = dict(details or {})

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({context})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, details={dict(self.details)!r})"


# ---------------------------------------------------------------------------
# Local inputs
# ---------------------------------------------------------------------------


class ConfigError(PeerbumpError):
    """A ``peerbump.toml`` / ``[tool.peerbump]`` file cannot be used."""

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        super().__init__(message, _present(path=config_path, option=option))
        self.config_path = config_path
        self.option = option


class FileOperationError(PeerbumpError):
    """Reading an input or writing a result failed.

    Args:
        message: Error description.
        file_path: File being accessed.
        operation: ``"read"``, ``"write"`` or ``"validate"``.
        original_error: Underlying OS or decode error.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        cause = str(original_error) if original_error is not None else None
        super().__init__(
            message,
            _present(path=file_path, operation=operation, original_error=cause),
        )
        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error


class MissingInputError(FileOperationError):
    """The workspace snapshot or target dependency file does not exist."""

    __slots__ = ("role",)

    def __init__(self, role: str, *, file_path: str) -> None:
        super().__init__(f"{role} file not found", file_path=file_path, operation="read")
        self.role = role
        self.details["role"] = role


class MalformedInputError(PeerbumpError):
    """An input file is empty, not JSON, or missing required fields."""

    __slots__ = ("role", "file_path")

    def __init__(
        self,
        message: str,
        *,
        role: Optional[str] = None,
        file_path: Optional[str] = None,
    ) -> None:
        super().__init__(message, _present(role=role, path=file_path))
        self.role = role
        self.file_path = file_path


# ---------------------------------------------------------------------------
# Registries
# ---------------------------------------------------------------------------


class NetworkError(PeerbumpError):
    """A registry request failed at the transport or HTTP level.

    Args:
        message: Error description.
        url: Requested URL.
        status_code: HTTP status, when a response arrived.
        response_body: Raw body; only a preview is kept in ``details``.
    """

    __slots__ = ("url", "status_code", "response_body")

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ) -> None:
        preview = _preview(response_body) if response_body is not None else None
        super().__init__(
            message,
            _present(url=url, status_code=status_code, response=preview),
        )
        self.url = url
        self.status_code = status_code
        self.response_body = response_body


class RegistryError(NetworkError):
    """A registry answered, but not with usable package metadata.

    Covers unknown packages (HTTP 404) and metadata documents missing the
    fields peerbump reads. Transport arguments go to :class:`NetworkError`.
    """

    __slots__ = ("package_name", "registry")

    def __init__(
        self,
        message: str,
        *,
        package_name: Optional[str] = None,
        registry: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.package_name = package_name
        self.registry = registry
        self.details.update(_present(package=package_name, registry=registry))


# ---------------------------------------------------------------------------
# Collaborator contracts
# ---------------------------------------------------------------------------


class DataIntegrityError(PeerbumpError):
    """A version source or closure service returned inconsistent data.

    For example a candidate version hosted on no registry, or a closure
    entry whose version text does not parse.
    """

    __slots__ = ("package_name", "version")

    def __init__(
        self,
        message: str,
        *,
        package_name: Optional[str] = None,
        version: Optional[str] = None,
    ) -> None:
        super().__init__(message, _present(package=package_name, version=version))
        self.package_name = package_name
        self.version = version

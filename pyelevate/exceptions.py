"""
Exception hierarchy for pyelevate.

Every error raised by pyelevate derives from :class:`PyElevateError` and
carries a ``details`` mapping with whatever context was known when it was
raised (line number, URL, path, ...). ``str(exc)`` renders the message
followed by those details.

Failure scope:

- :class:`ConfigError` and :class:`FileOperationError` abort a run.
- :class:`ParseError` costs one manifest line.
- :class:`NetworkError` and :class:`PackageIndexError` cost one package
  in one phase.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

_MAX_BODY_LENGTH = 200


class PyElevateError(Exception):
    """Root of the pyelevate exception tree.

    Args:
        message: Human-readable error message.
        **details: Context for diagnostics; ``None`` values are dropped.
    """

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = {
            key: value for key, value in details.items() if value is not None
        }

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({context})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, details={self.details!r})"


class ParseError(PyElevateError):
    """A manifest line that could not be interpreted."""

    def __init__(
        self,
        message: str,
        *,
        line_number: Optional[int] = None,
        line_content: Optional[str] = None,
        file_path: Optional[str] = None,
    ) -> None:
        super().__init__(message, line=line_number, content=line_content, file=file_path)
        self.line_number = line_number
        self.line_content = line_content
        self.file_path = file_path


class NetworkError(PyElevateError):
    """Transport failure, non-2xx status or undecodable response body.

    ``response_body`` is kept whole on the attribute but shortened in
    ``details``.
    """

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            url=url,
            status_code=status_code,
            response=_shorten(response_body) if response_body is not None else None,
        )
        self.url = url
        self.status_code = status_code
        self.response_body = response_body


class PackageIndexError(NetworkError):
    """The package index has no usable record of ``package_name``."""

    def __init__(
        self,
        message: str,
        *,
        package_name: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.package_name = package_name
        if package_name is not None:
            self.details["package"] = package_name


class FileOperationError(PyElevateError):
    """Reading, writing or backing up a file failed.

    Args:
        message: Error description.
        file_path: File involved.
        operation: ``"read"``, ``"write"`` or ``"backup"``.
        original_error: Underlying OS error, when there was one.
    """

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(
            message,
            path=file_path,
            operation=operation,
            original_error=str(original_error) if original_error else None,
        )
        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error


class ConfigError(PyElevateError):
    """Invalid configuration, or no manifest to operate on.

    Args:
        message: Error description.
        config_path: Offending configuration file or manifest path.
        option: Offending option name, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        super().__init__(message, path=config_path, option=option)
        self.config_path = config_path
        self.option = option


def _shorten(text: str) -> str:
    if len(text) <= _MAX_BODY_LENGTH:
        return text
    return text[:_MAX_BODY_LENGTH] + "..."

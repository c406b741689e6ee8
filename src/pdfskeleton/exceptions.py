#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Custom exceptions for the pdfskeleton library.

This module defines specialized exception classes for the error conditions
that can occur while turning a PDF into a document skeleton.

Exception Hierarchy
-------------------
- SkeletonError (base exception)

  - ValidationError (parameter/option validation)
    - InvalidOptionsError (wrong options class for parser)

  - ParsingError (input document parsing failures)
    - DocumentLoadError (unreadable or malformed document bytes)
      - PasswordProtectedError (password-protected files)
    - ParsingCancelledError (cooperative cancellation between pages)

  - DependencyError (missing/incompatible packages)

"""

from typing import Any


class SkeletonError(Exception):
    """Base exception class for all pdfskeleton-specific errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    Attributes
    ----------
    message : str
        The error message
    original_error : Exception or None
        The wrapped original exception, if any

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional original exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(SkeletonError):
    """Exception raised for invalid input parameters or options.

    Parameters
    ----------
    message : str
        Description of the validation error
    parameter_name : str, optional
        Name of the invalid parameter
    parameter_value : any, optional
        The invalid value that was provided
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self,
        message: str,
        parameter_name: str | None = None,
        parameter_value: Any = None,
        original_error: Exception | None = None,
    ):
        """Initialize the validation error with parameter details."""
        super().__init__(message, original_error=original_error)
        self.parameter_name = parameter_name
        self.parameter_value = parameter_value


class InvalidOptionsError(ValidationError):
    """Exception raised when an incorrect options class is provided to a parser.

    Parameters
    ----------
    converter_name : str
        Name of the parser that received invalid options
    expected_type : type
        The expected options class type
    received_type : type
        The actual options class type that was received
    message : str, optional
        Custom error message. If not provided, generates a helpful message

    """

    def __init__(
        self,
        converter_name: str,
        expected_type: type,
        received_type: type,
        message: str | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the invalid options error."""
        if message is None:
            message = (
                f"{converter_name} expected options of type '{expected_type.__name__}' "
                f"but received '{received_type.__name__}'."
            )
        super().__init__(
            message, parameter_name="options", parameter_value=received_type, original_error=original_error
        )
        self.converter_name = converter_name
        self.expected_type = expected_type
        self.received_type = received_type


class ParsingError(SkeletonError):
    """Exception raised when document parsing fails.

    Parameters
    ----------
    message : str
        Description of the parsing failure
    parsing_stage : str, optional
        The stage of parsing where the error occurred
    original_error : Exception, optional
        The underlying exception that caused the parsing failure

    """

    def __init__(self, message: str, parsing_stage: str | None = None, original_error: Exception | None = None):
        """Initialize the parsing error."""
        super().__init__(message, original_error)
        self.parsing_stage = parsing_stage


class DocumentLoadError(ParsingError):
    """Exception raised when document bytes cannot be opened.

    Raised before any page is processed, so no partial skeleton exists.

    Parameters
    ----------
    message : str
        Description of what went wrong while loading
    source_id : str, optional
        Caller-supplied identifier of the document
    original_error : Exception, optional
        The original exception raised by the rendering backend

    """

    def __init__(self, message: str, source_id: str | None = None, original_error: Exception | None = None):
        """Initialize the document load error."""
        super().__init__(message, parsing_stage="load", original_error=original_error)
        self.source_id = source_id


class PasswordProtectedError(DocumentLoadError):
    """Exception raised when a document requires a password that was not supplied or was wrong."""

    def __init__(
        self, message: str | None = None, source_id: str | None = None, original_error: Exception | None = None
    ):
        """Initialize the password protected error."""
        if message is None:
            if source_id:
                message = f"Document '{source_id}' is password-protected and requires authentication"
            else:
                message = "Document is password-protected and requires a password for access"
        super().__init__(message, source_id=source_id, original_error=original_error)
        self.parsing_stage = "authentication"


class ParsingCancelledError(ParsingError):
    """Exception raised when the caller's cancel check requests a stop between pages.

    Parameters
    ----------
    page_num : int
        1-based number of the page that would have been processed next

    """

    def __init__(self, page_num: int, message: str | None = None):
        """Initialize the cancellation error."""
        if message is None:
            message = f"Parsing cancelled before page {page_num}"
        super().__init__(message, parsing_stage="assembly")
        self.page_num = page_num


class DependencyError(SkeletonError):
    """Exception raised when required dependencies are not available.

    Parameters
    ----------
    converter_name : str
        Name of the component requiring dependencies
    missing_packages : list[tuple[str, str]]
        List of (package_name, version_spec) tuples for missing packages
    version_mismatches : list[tuple[str, str, str]], optional
        List of (package_name, required_version, installed_version) tuples
    install_command : str, optional
        Suggested pip install command to resolve the issue
    message : str, optional
        Custom error message. If not provided, generates a helpful message

    """

    def __init__(
        self,
        converter_name: str,
        missing_packages: list[tuple[str, str]],
        version_mismatches: list[tuple[str, str, str]] | None = None,
        install_command: str = "",
        message: str | None = None,
        original_import_error: ImportError | None = None,
    ):
        """Initialize the dependency error with package details."""
        version_mismatches = version_mismatches or []
        self.original_import_error = original_import_error
        if message is None:
            message_parts = []

            if missing_packages:
                pkg_list = ", ".join(f"'{name}{spec}'" if spec else f"'{name}'" for name, spec in missing_packages)
                message_parts.append(f"{converter_name.upper()} requires the following packages: {pkg_list}")

            if version_mismatches:
                mismatch_str = ", ".join(
                    f"'{name}' (requires {required}, but {installed} is installed)"
                    for name, required, installed in version_mismatches
                )
                message_parts.append(f"{converter_name.upper()} has version mismatches: {mismatch_str}")

            message = "\n".join(message_parts)

            if install_command:
                message += f"\nInstall with: {install_command}"
            else:
                all_packages = missing_packages + [(name, req) for name, req, _ in version_mismatches]
                if all_packages:
                    packages_str = " ".join(f'"{name}{spec}"' if spec else name for name, spec in all_packages)
                    message += f"\nInstall with: pip install --upgrade {packages_str}"

        super().__init__(message)
        self.converter_name = converter_name
        self.missing_packages = missing_packages
        self.version_mismatches = version_mismatches
        self.install_command = install_command

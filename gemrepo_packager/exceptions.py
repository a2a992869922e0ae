"""Custom exceptions for gemrepo-packager."""

from __future__ import annotations

from pathlib import Path


class PackagerError(Exception):
    """Base exception for all packaging pipeline errors."""

    stage: str = "unknown"


class ConfigurationError(PackagerError):
    """Raised when a required input file is missing or the project root is unusable."""

    stage = "validate"

    def __init__(self, message: str, path: str | Path | None = None):
        self.path = str(path) if path is not None else None
        super().__init__(message)

    @classmethod
    def missing_file(cls, file_name: str, project_root: str | Path) -> ConfigurationError:
        return cls(
            f"No {file_name} was found in the root of your project. "
            f"Please ensure a {file_name} exists, is readable, and is in the root "
            f"of your project structure. The project root appears to be at "
            f"[{project_root}].",
            path=Path(project_root) / file_name,
        )


class ResolutionError(PackagerError):
    """Raised when the external dependency resolver fails for any reason."""

    stage = "resolve"

    def __init__(self, manifest: str | Path, detail: str = ""):
        self.manifest = str(manifest)
        self.detail = detail
        message = (
            "Gem repository was not properly constructed. Please check the output "
            "for errors. Try running bundle install manually to verify the contents "
            f"of the Gemfile. [{manifest}]"
        )
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class EnvironmentSetupError(PackagerError):
    """Raised when a scratch directory cannot be created."""

    stage = "resolve"

    def __init__(self, location: str | Path):
        self.location = str(location)
        super().__init__(
            "Error trying to create temporary directory for the gems, please ensure "
            f"the temporary directory [{location}] isn't full and is writeable."
        )


class PackagingError(PackagerError):
    """Raised when the archive cannot be created or written."""

    stage = "package"

    def __init__(self, artifact_path: str | Path, detail: str = "", *, message: str | None = None):
        self.artifact_path = str(artifact_path)
        self.detail = detail
        if message is None:
            message = (
                f"Error trying to create the jar containing the gems repository "
                f"[{artifact_path}], please ensure the target directory exists or is "
                "creatable, is not full, and is writeable."
            )
            if detail:
                message = f"{message} ({detail})"
        super().__init__(message)

    @classmethod
    def duplicate_entry(cls, artifact_path: str | Path, name: str) -> PackagingError:
        return cls(
            artifact_path,
            detail=f"duplicate entry [{name}]",
            message=(
                f"The gem repository tree contains a duplicate entry [{name}] for the "
                f"jar [{artifact_path}]. Each file may only be added once; check the "
                "resolved tree for a file that collides with the archive metadata."
            ),
        )

"""gemrepo-packager: resolve a Gemfile and package the gems into one archive."""

__version__ = "0.1.0"

from gemrepo_packager.archive.packager import TreePackager
from gemrepo_packager.archive.symlinks import is_symbolic_link
from gemrepo_packager.archive.writer import ArchiveWriter
from gemrepo_packager.config import PackagerConfig
from gemrepo_packager.exceptions import (
    ConfigurationError,
    EnvironmentSetupError,
    PackagerError,
    PackagingError,
    ResolutionError,
)
from gemrepo_packager.models.packaging import ArchiveEntry, PackagingOutput, PackagingState
from gemrepo_packager.orchestrator import PackagingOrchestrator, package_gem_repository
from gemrepo_packager.pruner import prune_tree
from gemrepo_packager.resolver.base import DependencyResolver
from gemrepo_packager.resolver.bundler import BundlerResolver

__all__ = [
    "ArchiveEntry",
    "ArchiveWriter",
    "BundlerResolver",
    "ConfigurationError",
    "DependencyResolver",
    "EnvironmentSetupError",
    "PackagerError",
    "PackagingError",
    "PackagingOrchestrator",
    "PackagingOutput",
    "PackagingState",
    "PackagerConfig",
    "ResolutionError",
    "TreePackager",
    "is_symbolic_link",
    "package_gem_repository",
    "prune_tree",
]

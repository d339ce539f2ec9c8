"""Scaffold new Empirica experiment apps.

The package validates the requested project name, checks that the
destination directory is safe to write into, renders a template tree with
ordered rename rules and placeholder substitution, widens pinned runtime
dependencies into caret ranges and finally installs dependencies with the
chosen package manager. Every stage can be driven programmatically through
:class:`Orchestrator` or from the command line interface.
"""

from __future__ import annotations

from .config import ProjectRequest, RenderConfig, ScaffoldSettings
from .errors import ScaffoldError
from .guard import DirectoryConflictReport, assess_directory
from .manifest import patch_manifest
from .network import is_reachable
from .orchestrator import Orchestrator, ScaffoldResult, Stage
from .rename import DEFAULT_RENAME_RULES, RenameRule, apply_rename_rules
from .scaffold import TemplateScaffolder
from .template import TemplateRenderer, TemplateRenderingError

__all__ = [
    "DEFAULT_RENAME_RULES",
    "DirectoryConflictReport",
    "Orchestrator",
    "ProjectRequest",
    "RenameRule",
    "RenderConfig",
    "ScaffoldError",
    "ScaffoldResult",
    "ScaffoldSettings",
    "Stage",
    "TemplateRenderer",
    "TemplateRenderingError",
    "TemplateScaffolder",
    "apply_rename_rules",
    "assess_directory",
    "is_reachable",
    "patch_manifest",
]

__version__ = "0.1.0"

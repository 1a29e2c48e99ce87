"""
monoinit package

This package bootstraps a freshly created app from a template and restructures it
into a lerna workspace.

Key responsibilities are split across modules:
- `config.py`: configuration model, YAML loading, package manager (`ToolKind`)
- `manifest.py`: package.json I/O and the template manifest merge
- `descriptor.py`: template package location and `template.json` parsing
- `renderer.py`: copying the template tree and reconciling README / gitignore
- `commands.py`: package manager invocations (install plans, uninstall)
- `typescript.py`: TypeScript setup after a TypeScript template is installed
- `vcs.py`: git init / baseline commit with fail-clean cleanup
- `workspace.py`: client relocation, per-package manifests, lerna setup
- `pipeline.py`: stage orchestration and failure reporting
- `cli.py`: CLI entrypoint
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"

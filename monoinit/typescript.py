"""
typescript.py

Responsibility: Make sure a TypeScript template is ready to compile once its
dependencies are installed.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_TSCONFIG: dict[str, Any] = {
    "compilerOptions": {
        "target": "es5",
        "lib": ["dom", "dom.iterable", "esnext"],
        "allowJs": True,
        "skipLibCheck": True,
        "esModuleInterop": True,
        "allowSyntheticDefaultImports": True,
        "strict": True,
        "forceConsistentCasingInFileNames": True,
        "noFallthroughCasesInSwitch": True,
        "module": "esnext",
        "moduleResolution": "node",
        "resolveJsonModule": True,
        "isolatedModules": True,
        "noEmit": True,
        "jsx": "react-jsx",
    },
    "include": ["src"],
}

APP_TYPE_DECLARATIONS = '/// <reference types="react-scripts" />' + os.linesep


def verify_typescript_setup(app_path: str | Path) -> bool:
    """
    Write a default `tsconfig.json` and `src/react-app-env.d.ts` when missing.

    Returns whether the `typescript` package resolves from the app's `node_modules`.
    """
    root = Path(app_path)

    tsconfig = root / "tsconfig.json"
    if not tsconfig.exists():
        logger.info("We detected TypeScript in your project and created a tsconfig.json file for you.")
        tsconfig.write_text(json.dumps(DEFAULT_TSCONFIG, indent=2) + os.linesep, encoding="utf-8", newline="")

    src = root / "src"
    declarations = src / "react-app-env.d.ts"
    if src.is_dir() and not declarations.exists():
        declarations.write_text(APP_TYPE_DECLARATIONS, encoding="utf-8", newline="")

    if not (root / "node_modules" / "typescript" / "package.json").exists():
        logger.warning("It looks like you're trying to use TypeScript but do not have typescript installed.")
        return False
    return True

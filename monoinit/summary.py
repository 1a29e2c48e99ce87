"""
summary.py

Responsibility: Render the human-readable "what next" text shown after a run.
"""

from __future__ import annotations

from jinja2 import Environment, StrictUndefined

from monoinit.config import ToolKind
from monoinit.pipeline import InitResult

_SUCCESS_TEMPLATE = """\
Success! Created {{ app_name }} at {{ app_path }}
Inside that directory, you can run several commands:

  {{ cmd }} start
    Starts the development server.

  {{ cmd }} {{ run }}build
    Bundles the app into static files for production.

  {{ cmd }} test
    Starts the test runner.

  {{ cmd }} {{ run }}eject
    Removes this tool and copies build dependencies, configuration files
    and scripts into the app directory. If you do this, you can't go back!
{% if packages %}
The workspace manages these packages with {{ workspace_tool }}:
{% for name in packages %}  - {{ name }}
{% endfor %}{% endif %}
We suggest that you begin by typing:

  cd {{ cd_path }}
  {{ cmd }} start
{% if readme_renamed %}
You had a `README.md` file, we renamed it to `README.old.md`
{% endif %}
Happy hacking!
"""

_FAILURE_TEMPLATE = """\
Could not finish setting up {{ app_name }} ({{ failure }}).
{{ message }}
The directory {{ app_path }} was left as-is; re-running over it is not supported.
"""

_env = Environment(autoescape=False, undefined=StrictUndefined, keep_trailing_newline=True)


def render_summary(result: InitResult, *, workspace_tool: str = "lerna") -> str:
    if not result.ok:
        return _env.from_string(_FAILURE_TEMPLATE).render(
            app_name=result.app_name,
            app_path=result.app_path,
            failure=result.failure.value if result.failure else "unknown",
            message=result.message,
        )
    return _env.from_string(_SUCCESS_TEMPLATE).render(
        app_name=result.app_name,
        app_path=result.app_path,
        cmd=result.tool.display_name,
        run="" if result.tool is ToolKind.YARN else "run ",
        cd_path=result.cd_path,
        readme_renamed=result.readme_renamed,
        packages=list(result.workspace.packages) if result.workspace else [],
        workspace_tool=workspace_tool,
    )

from __future__ import annotations

from pathlib import Path
from typing import Any

from direnv_reload.config import ConfigResolver
from direnv_reload.model import PHASES, CLIArgs, ExecutionPlan, ReloadSettings


def resolver_for(cli: CLIArgs, **kwargs: Any) -> ConfigResolver:
    """Build a ConfigResolver with CLI overrides mapped to config keys."""

    cli_args: dict[str, Any] = {}
    if cli.project_dir is not None:
        cli_args["project_dir"] = cli.project_dir
    if cli.direnv_executable is not None:
        cli_args["direnv.executable"] = cli.direnv_executable
    if cli.verbosity is not None:
        cli_args["logging.level"] = cli.verbosity

    if cli.config_path is not None and "user_config_path" not in kwargs:
        kwargs["user_config_path"] = Path(cli.config_path).expanduser()
        kwargs["require_user_config"] = True

    return ConfigResolver(cli_args=cli_args, **kwargs)


def _project_dir(raw: str) -> Path:
    p = Path(raw).expanduser()
    if not p.is_absolute():
        p = Path.cwd() / p
    return p


def build_plan(cli: CLIArgs, resolver: ConfigResolver | None = None) -> ExecutionPlan:
    """Build a deterministic ExecutionPlan from CLI args and configuration."""

    resolver = resolver or resolver_for(cli)

    settings = ReloadSettings(
        project_dir=_project_dir(resolver.resolve_str("project_dir")),
        direnv_executable=resolver.resolve_str("direnv.executable"),
        force_env=resolver.resolve_str("direnv.force_env"),
        noop_command=resolver.resolve_argv("direnv.noop_command"),
        trigger_name=resolver.resolve_str("files.trigger"),
        cache_dir_name=resolver.resolve_str("files.cache_dir"),
        profile_glob=resolver.resolve_str("files.profile_glob"),
        verbosity=resolver.resolve_logging_policy().level_name,
    )

    sources: list[str] = []
    for src in resolver.resolve_all().values():
        if src.source not in sources:
            sources.append(src.source)

    return ExecutionPlan(
        settings=settings,
        config_sources=tuple(sorted(sources)),
        phases=PHASES,
    )


def render_plan_summary(plan: ExecutionPlan) -> str:
    s = plan.settings
    lines: list[str] = []
    lines.append("direnv-reload PLAN")
    lines.append(f"project_dir={s.project_dir}")
    lines.append(f"config_sources={','.join(plan.config_sources)}")
    lines.append("phases=" + ",".join(p.value for p in plan.phases))
    lines.append("parameters:")
    params = {
        "cache_dir": s.cache_dir,
        "direnv_executable": s.direnv_executable,
        "force_env": s.force_env,
        "noop_command": " ".join(s.noop_command),
        "profile_glob": s.profile_glob,
        "trigger_file": s.trigger_file,
        "verbosity": s.verbosity,
    }
    for k in sorted(params):
        lines.append(f"  - {k}={params[k]}")
    return "\n".join(lines) + "\n"


def render_config(resolver: ConfigResolver) -> str:
    lines = [f"{key}={src.value!r} ({src.source})" for key, src in resolver.resolve_all().items()]
    return "\n".join(lines) + "\n"

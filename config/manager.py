"""Configuration manager: load, save, validate and edit interactively.

Uses ruamel.yaml for YAML serialisation with comments. The theme
preference lives in the same file and is written back on every change.
"""

import json
import os
from datetime import date
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import FloatPrompt, Prompt
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.defaults import default_app_config
from config.schema import AppConfig, Theme

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120

ENV_API_URL = "STAR_API_URL"


# ─── YAML COMMENTS ───

_YAML_HEADER = f"""\
# ============================================
# STAR Admin configuration
# Written: {date.today().isoformat()}
# ============================================
"""

_FIELD_COMMENTS = {
    "api_base_url": "Base URL of the STAR REST API (overridden by $STAR_API_URL)",
    "request_timeout": "Seconds per request; failed requests are not retried",
    "theme": "light or dark",
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "star_config.yaml"

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else self.DEFAULT_CONFIG

    def first_run_check(self) -> bool:
        """True when no config file exists yet."""
        return not self.path.exists()

    # ─── Load ───

    def load(self) -> AppConfig:
        """Load the config from YAML; validated by pydantic.

        A missing file yields the defaults. $STAR_API_URL, when set,
        replaces the stored base URL for this run only.
        """
        if not self.path.exists():
            config = default_app_config()
        else:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = yaml.load(f) or {}
            try:
                config = AppConfig.model_validate(dict(raw))
            except Exception as e:
                raise ValueError(
                    f"Invalid config file: {self.path}\n"
                    f"Pydantic error: {e}"
                ) from e

        env_url = os.environ.get(ENV_API_URL)
        if env_url:
            config = AppConfig.model_validate(
                {**config.model_dump(), "api_base_url": env_url}
            )
        return config

    # ─── Save ───

    def save(self, config: AppConfig, quiet: bool = False) -> None:
        """Write the config as commented YAML."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = self._build_commented_yaml(config)
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)
        if not quiet:
            console.print(f"[green]✓[/green] Config saved: {self.path}")

    def _build_commented_yaml(self, config: AppConfig) -> CommentedMap:
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)
        for key, comment in _FIELD_COMMENTS.items():
            if key in cm:
                cm.yaml_add_eol_comment(comment, key)
        return cm

    # ─── Preferences ───

    def set_theme(self, theme: Theme) -> AppConfig:
        """Persist a theme choice and return the updated config."""
        config = self.load_stored().model_copy(update={"theme": theme})
        self.save(config, quiet=True)
        return config

    def toggle_theme(self) -> AppConfig:
        current = self.load_stored()
        return self.set_theme(current.theme.toggled())

    def load_stored(self) -> AppConfig:
        """Like load(), but without the environment override.

        Used before writing so an exported $STAR_API_URL never ends up
        in the file.
        """
        saved_env = os.environ.pop(ENV_API_URL, None)
        try:
            return self.load()
        finally:
            if saved_env is not None:
                os.environ[ENV_API_URL] = saved_env

    # ─── Interactive editing ───

    def edit_interactive(self, config: AppConfig) -> AppConfig:
        """Prompt for every setting, keeping current values as defaults."""
        console.print(Panel("[bold]Edit configuration[/bold]", border_style="cyan"))
        url = Prompt.ask("API base URL", default=config.api_base_url)
        timeout = FloatPrompt.ask("Request timeout (s)", default=config.request_timeout)
        theme = Prompt.ask(
            "Theme", choices=[t.value for t in Theme], default=config.theme.value
        )
        config = AppConfig(api_base_url=url, request_timeout=timeout, theme=Theme(theme))
        self.save(config)
        return config

import os
import json
import argparse
from dataclasses import dataclass, asdict

from log import log
from fruit import PLACEMENT_STRATEGIES

CONFIG_PATH = "./worm_config.json"

SETTING_DEFAULTS = {
    "fruit_count": 5,
    "worm_length": 4,
    "stats": False,
    "fps": 30,
    "placement": "scan",
}


class ConfigError(Exception):
    """Settings the game cannot start with."""


@dataclass(frozen=True)
class GameSettings:
    fruit_count: int = SETTING_DEFAULTS["fruit_count"]
    worm_length: int = SETTING_DEFAULTS["worm_length"]
    stats: bool = SETTING_DEFAULTS["stats"]
    fps: int = SETTING_DEFAULTS["fps"]
    placement: str = SETTING_DEFAULTS["placement"]

    def validate(self):
        for name in ("fruit_count", "worm_length", "fps"):
            val = getattr(self, name)
            if isinstance(val, bool) or not isinstance(val, int):
                raise ConfigError(f"{name} must be an integer, got {val!r}")
        if not isinstance(self.stats, bool):
            raise ConfigError(f"stats must be true or false, got {self.stats!r}")
        if self.fruit_count < 0:
            raise ConfigError("fruit_count cannot be negative")
        if self.worm_length < 1:
            raise ConfigError("worm_length must be at least 1")
        if self.fps < 1:
            raise ConfigError("fps must be at least 1")
        if self.placement not in PLACEMENT_STRATEGIES:
            choices = ", ".join(sorted(PLACEMENT_STRATEGIES))
            raise ConfigError(f"placement must be one of: {choices}")
        return self

    @property
    def frame_budget(self):
        """Seconds available to one tick."""
        return 1.0 / self.fps

    def as_dict(self):
        return asdict(self)


def load_config(path=CONFIG_PATH):
    if not os.path.exists(path):
        config = {}
    else:
        with open(path, "r", encoding="utf-8") as f:
            try:
                config = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigError(f"{path} is corrupted: {e}") from e

    if not isinstance(config, dict):
        raise ConfigError(f"{path} must hold a JSON object")

    unknown = sorted(set(config) - set(SETTING_DEFAULTS))
    if unknown:
        log(f"[yellow]⚠️ Ignoring unknown config keys: {', '.join(unknown)}[/]")

    for key, val in SETTING_DEFAULTS.items():
        if key not in config:
            config[key] = val

    return {k: config[k] for k in SETTING_DEFAULTS}


def save_config(config, path=CONFIG_PATH):
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(config, f, ensure_ascii=False, indent=4)
    except OSError as e:
        log(f"[red]❌ Failed to save config: {e}[/]")
        return False
    return True


def build_parser():
    parser = argparse.ArgumentParser(prog="termworm", description="Terminal worm game.")
    parser.add_argument("-f", "--fruit-count", type=int, help="number of fruit on the board at once")
    parser.add_argument("-w", "--worm-length", type=int, help="starting length of the worm")
    parser.add_argument("-s", "--stats", action="store_true", default=None,
                        help="show render speed stats on exit")
    parser.add_argument("--fps", type=int, help="target frames per second")
    parser.add_argument("--placement", choices=sorted(PLACEMENT_STRATEGIES),
                        help="fruit placement algorithm")
    parser.add_argument("--config", default=CONFIG_PATH, help="path of the JSON settings file")
    parser.add_argument("--save", action="store_true",
                        help="write the resulting settings back to the config file")
    return parser


def resolve_settings(argv=None):
    """Defaults, then the config file, then command-line flags."""
    args = build_parser().parse_args(argv)
    config = load_config(args.config)

    overrides = {
        "fruit_count": args.fruit_count,
        "worm_length": args.worm_length,
        "stats": args.stats,
        "fps": args.fps,
        "placement": args.placement,
    }
    for key, val in overrides.items():
        if val is not None:
            config[key] = val

    settings = GameSettings(**config).validate()

    if args.save and save_config(settings.as_dict(), args.config):
        log(f"[green]💾 Settings saved to {args.config}[/]")

    return settings

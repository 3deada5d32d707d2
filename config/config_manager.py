import copy
import os
import yaml

DEFAULT_CONFIG = {
    "logging_level": "INFO",
    "slideshow": {
        "default_timeout_ms": 5000,
        "shuffle": False,
        "fullscreen": True,
    },
    "network": {
        "transfer_timeout_ms": 30000,
    },
    "gui": {
        "background_color": "#000000",
        "margin": 8,
        "caption_font": "Arial",
        "caption_font_size": 18,
        "caption_color": "#dddddd",
        "status_font": "Arial",
        "status_font_size": 14,
        "status_color": "#f5a623",
    },
    "hotkeys": {
        "right": {
            "sequence": "Right",
            "description": "Go to next image"
        },
        "left": {
            "sequence": "Left",
            "description": "Go to previous image"
        },
        "space": {
            "sequence": "Space",
            "description": "Pause/restart slideshow"
        },
        "del": {
            "sequence": "Del",
            "description": "Remove current image",
            "extra_sequences": ["Backspace"]
        },
        "plus": {
            "sequence": "+",
            "description": "Change slides more frequently",
            "extra_sequences": ["="]
        },
        "minus": {
            "sequence": "-",
            "description": "Change slides less frequently"
        },
        "c": {
            "sequence": "C",
            "description": "Show/hide captions"
        },
        "f": {
            "sequence": "F",
            "description": "Enter/leave focus mode"
        },
        "h": {
            "sequence": "H",
            "description": "Show/hide this help",
            "extra_sequences": ["?"]
        },
        "l": {
            "sequence": "L",
            "description": "List notes"
        },
        "n": {
            "sequence": "N",
            "description": "Add current image to list of notes"
        },
        "q": {
            "sequence": "Q",
            "description": "Show less logging messages"
        },
        "r": {
            "sequence": "R",
            "description": "Reset (clear) the list of notes"
        },
        "v": {
            "sequence": "V",
            "description": "Show more logging messages"
        },
        "quit": {
            "sequence": "Esc",
            "description": "Quit"
        }
    },
    "image_extensions": [".jpg", ".jpeg", ".png", ".bmp", ".gif", ".tiff", ".tif", ".webp"],
    "ignore_patterns": ["._*"]  # glob patterns
}

def _default_config_path() -> str:
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return os.path.join(xdg_config_home, "photo-slideshow", "config.yaml")


def _deep_merge(base: dict, override: dict) -> dict:
    result = copy.deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class ConfigManager:
    """User preferences from a YAML file layered over ``DEFAULT_CONFIG``."""

    def __init__(self, config_path: str | None = None):
        self.config_path = config_path or _default_config_path()
        self.config = self.load_config()

    def load_config(self):
        try:
            with open(self.config_path, "r") as f:
                user_config = yaml.safe_load(f) or {}
        except FileNotFoundError:
            self.save_config(DEFAULT_CONFIG)
            return _deep_merge(DEFAULT_CONFIG, {})
        except yaml.YAMLError as exc:
            raise ValueError(f"Malformed config at {self.config_path}") from exc
        if not isinstance(user_config, dict):
            raise ValueError(f"Config at {self.config_path} must be a mapping")
        return _deep_merge(DEFAULT_CONFIG, user_config)

    def save_config(self, config):
        os.makedirs(os.path.dirname(self.config_path), exist_ok=True)
        with open(self.config_path, "w") as f:
            yaml.dump(config, f, default_flow_style=False)

    def get(self, key, default=None):
        keys = key.split('.')
        value = self.config
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default
        return value if value is not None else default

    def set(self, key, value):
        keys = key.split('.')
        node = self.config
        for k in keys[:-1]:
            node = node.setdefault(k, {})
        node[keys[-1]] = value
        self.save_config(self.config)

    @property
    def logging_level(self):
        return self.get("logging_level", "INFO")

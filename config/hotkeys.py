# config/hotkeys.py

import logging
from dataclasses import dataclass, field
from typing import Dict, List

# Help listing order; commands not named here are appended alphabetically.
COMMAND_ORDER = [
    "c", "f", "h", "l", "n", "q", "r", "v",
    "left", "right", "plus", "minus", "space", "del",
]


@dataclass
class HotkeyDefinition:
    """A slideshow command and the key sequences that trigger it."""
    command: str
    sequences: List[str] = field(default_factory=list)
    description: str = ""

    @classmethod
    def from_config(cls, command: str, config) -> 'HotkeyDefinition':
        """Accepts either a bare sequence string or a ``{sequence, extra_sequences, description}`` dict."""
        if isinstance(config, str):
            return cls(command=command, sequences=[config])
        if not isinstance(config, dict):
            raise ValueError(f"Hotkey '{command}' must be a string or a mapping, got {type(config).__name__}")
        sequences = []
        if config.get("sequence"):
            sequences.append(str(config["sequence"]))
        sequences.extend(str(s) for s in config.get("extra_sequences") or [])
        return cls(command=command, sequences=sequences, description=config.get("description", ""))

    def keys_label(self) -> str:
        return " / ".join(self.sequences)


def load_definitions(hotkeys_config: dict) -> Dict[str, HotkeyDefinition]:
    """Build definitions in help order, skipping entries without any sequence."""
    definitions: Dict[str, HotkeyDefinition] = {}
    known = [c for c in COMMAND_ORDER if c in hotkeys_config]
    others = sorted(c for c in hotkeys_config if c not in COMMAND_ORDER)
    for command in known + others:
        try:
            definition = HotkeyDefinition.from_config(command, hotkeys_config[command])
        except ValueError as e:
            # why: skip malformed config entries without aborting the whole load
            logging.error(f"Error loading hotkey config for {command}: {e}")
            continue
        if definition.sequences:
            definitions[command] = definition
    return definitions

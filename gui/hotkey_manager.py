from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtCore import Qt, QObject
import logging
from typing import Callable, Dict, List

from config.hotkeys import HotkeyDefinition, load_definitions


class HotkeyManager(QObject):
	"""Turns configured key sequences into named slideshow commands."""

	def __init__(self, parent_widget, hotkeys_config: dict, dispatch: Callable[[str], bool]):
		super().__init__()
		self.setParent(parent_widget)
		self.parent_widget = parent_widget
		self.shortcuts: Dict[str, List[QShortcut]] = {}
		self.definitions: Dict[str, HotkeyDefinition] = {}
		self._dispatch = dispatch
		self.load_config(hotkeys_config)

	def load_config(self, config: dict):
		for definition in load_definitions(config).values():
			self.add_hotkey_shortcut(definition)

	def add_hotkey_shortcut(self, definition: HotkeyDefinition):
		if not definition.sequences:
			return

		logging.debug(f"Setting up hotkey: {definition.command} ({definition.sequences})")

		self.definitions[definition.command] = definition
		self.shortcuts[definition.command] = []

		for sequence in definition.sequences:
			key_sequence = QKeySequence(sequence)
			if key_sequence.isEmpty():
				logging.error(f"Invalid key sequence '{sequence}' for command {definition.command}")
				continue
			shortcut = QShortcut(key_sequence, self.parent_widget)
			shortcut.setContext(Qt.ApplicationShortcut)
			shortcut.activated.connect(
				lambda c=definition.command: self.on_shortcut_triggered(c)
			)
			self.shortcuts[definition.command].append(shortcut)

	def on_shortcut_triggered(self, command: str):
		logging.debug(f"HotkeyManager.on_shortcut_triggered: '{command}'")
		if not self._dispatch(command):
			logging.debug(f"Command '{command}' was not handled")

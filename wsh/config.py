#!/usr/bin/env python3
import json
import os
from pathlib import Path


class Config:
    # Shell builtins handled in-process
    BUILTIN_COMMANDS = {
        "exit",
        "cd",
        "pwd",
        "set",
        "export",
        "unset",
        "abbr",
        "history",
        "pbcopy",
        "pbpaste",
    }

    KEYWORDS = {
        "if",
        "else",
        "end",
        "for",
        "in",
        "while",
        "function",
        "return",
        "and",
        "or",
        "not",
        "begin",
        "switch",
        "case",
    }

    # Suffixes tried when a bare program name cannot be spawned
    EXECUTABLE_SUFFIXES = [".exe", ".cmd", ".bat"]
    SCRIPT_SUFFIXES = [".cmd", ".bat"]
    COMMAND_INTERPRETER = ["cmd.exe", "/c"]

    HISTORY_MAX_ENTRIES = 1000

    INPUT_POLL_TIMEOUT = 0.05
    PAGER_MAX_VISIBLE = 5
    MAN_PAGE_TIMEOUT = 5

    DEFAULT_ABBREVIATIONS = {}

    CONFIG_DIR = Path.home() / ".wsh"
    CONFIG_JSON_FILE = CONFIG_DIR / "config.json"
    LOG_FILE = CONFIG_DIR / "shell.log"
    ABBR_FILE = CONFIG_DIR / "abbreviations.json"
    HISTORY_FILE = Path.home() / ".local" / "share" / "wsh" / "wsh_history"
    COMPLETION_CACHE_DIR = Path.home() / ".local" / "state" / "wsh" / "completions"

    LOG_LEVEL = "WARNING"

    WELCOME_MESSAGE = "Welcome to wsh"

    SHOW_STARTUP_BANNER = True

    HELP_KEYBINDS = [
        ("Tab", "Complete / next candidate"),
        ("Shift+Tab", "Previous candidate"),
        ("Ctrl+F", "Accept suggestion"),
        ("Ctrl+W", "Delete word"),
        ("Ctrl+U", "Delete line"),
        ("Ctrl+K", "Delete to end of line"),
        ("Ctrl+L", "Clear screen"),
        ("Ctrl+D", "Exit on empty line"),
    ]

    PROMPT_STYLES = {
        "user": "#a6d189 bold",
        "separator": "#737994",
        "path": "#8caaee bold",
        "prompt_symbol": "#f2d5cf bold",
        "suggestion": "#737994",
        "pager_item": "#c6d0f5",
        "pager_selected": "reverse bold",
        "pager_description": "#737994 italic",
    }

    PANEL_STYLES = {
        "default": {
            "border_style": "#888888",
            "padding": (0, 1),
            "title_align": "left",
            "expand": False,
        },
        "info": {
            "border_style": "#8caaee",
            "padding": (0, 1),
            "title_align": "left",
            "expand": False,
        },
        "success": {
            "border_style": "#a6d189",
            "padding": (0, 1),
            "title_align": "left",
            "expand": False,
        },
        "error": {
            "border_style": "#e78284",
            "padding": (0, 1),
            "title_align": "left",
            "expand": False,
        },
        "warning": {
            "border_style": "#e5c890",
            "padding": (0, 1),
            "title_align": "left",
            "expand": False,
        },
    }

    HIGHLIGHTER_ENABLED = True
    HIGHLIGHT_STYLES = {
        "command.valid": "bold #a6d189",
        "command.invalid": "bold #e78284",
        "keyword": "bold #ca9ee6",
        "operator": "#ef9f76",
        "option": "#81c8be",
        "string": "#e5c890",
        "variable": "#f4b8e4",
        "path": "underline",
    }

    @classmethod
    def ensure_directories(cls):
        cls.CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        cls.HISTORY_FILE.parent.mkdir(parents=True, exist_ok=True)
        cls.COMPLETION_CACHE_DIR.mkdir(parents=True, exist_ok=True)

        if not cls.CONFIG_JSON_FILE.exists():
            cls._write_default_json_config()

        if not cls.ABBR_FILE.exists():
            cls.ABBR_FILE.write_text(
                json.dumps(cls.DEFAULT_ABBREVIATIONS), encoding="utf-8"
            )

    @classmethod
    def is_highlighter_enabled(cls) -> bool:
        env_value = os.getenv("WSH_HIGHLIGHTER")
        if env_value is not None:
            normalized = env_value.strip().lower()
            if normalized in {"0", "false", "no", "off"}:
                return False
            if normalized in {"1", "true", "yes", "on"}:
                return True
        return cls.HIGHLIGHTER_ENABLED

    @classmethod
    def get_log_level(cls) -> str:
        env_value = os.getenv("WSH_LOG_LEVEL")
        if env_value:
            return env_value.strip().upper()
        return str(cls.LOG_LEVEL).upper()

    @classmethod
    def _load_external_config(cls) -> None:
        # Class defaults stay in place when config.json is missing or broken
        cls._load_json_config()

    @classmethod
    def _load_json_config(cls) -> bool:
        if not cls.CONFIG_JSON_FILE.exists():
            return False

        try:
            with cls.CONFIG_JSON_FILE.open("r", encoding="utf-8") as f:
                config_data = json.load(f)
        except (json.JSONDecodeError, OSError):
            return False

        def get_nested(data, *keys, default=None):
            current = data
            for key in keys:
                if isinstance(current, dict) and key in current:
                    current = current[key]
                else:
                    return default
            return current

        cls.WELCOME_MESSAGE = get_nested(
            config_data, "general", "welcome_message", default=cls.WELCOME_MESSAGE
        )
        cls.SHOW_STARTUP_BANNER = get_nested(
            config_data,
            "general",
            "show_startup_banner",
            default=cls.SHOW_STARTUP_BANNER,
        )
        cls.LOG_LEVEL = get_nested(
            config_data, "general", "log_level", default=cls.LOG_LEVEL
        )

        cls.HISTORY_MAX_ENTRIES = get_nested(
            config_data,
            "shell",
            "history_max_entries",
            default=cls.HISTORY_MAX_ENTRIES,
        )
        executable_suffixes = get_nested(
            config_data,
            "shell",
            "executable_suffixes",
            default=cls.EXECUTABLE_SUFFIXES,
        )
        if isinstance(executable_suffixes, list):
            cls.EXECUTABLE_SUFFIXES = executable_suffixes
        script_suffixes = get_nested(
            config_data, "shell", "script_suffixes", default=cls.SCRIPT_SUFFIXES
        )
        if isinstance(script_suffixes, list):
            cls.SCRIPT_SUFFIXES = script_suffixes
        interpreter = get_nested(
            config_data,
            "shell",
            "command_interpreter",
            default=cls.COMMAND_INTERPRETER,
        )
        if isinstance(interpreter, list) and interpreter:
            cls.COMMAND_INTERPRETER = interpreter
        keywords = get_nested(config_data, "shell", "keywords", default=None)
        if isinstance(keywords, list):
            cls.KEYWORDS = set(keywords)
        abbreviations = get_nested(
            config_data, "shell", "default_abbreviations", default=None
        )
        if isinstance(abbreviations, dict):
            cls.DEFAULT_ABBREVIATIONS = abbreviations

        cls.INPUT_POLL_TIMEOUT = get_nested(
            config_data,
            "ui",
            "input_poll_timeout",
            default=cls.INPUT_POLL_TIMEOUT,
        )
        cls.PAGER_MAX_VISIBLE = get_nested(
            config_data, "ui", "pager_max_visible", default=cls.PAGER_MAX_VISIBLE
        )
        prompt_styles = get_nested(config_data, "ui", "prompt_styles", default=None)
        if isinstance(prompt_styles, dict):
            cls.PROMPT_STYLES = {**cls.PROMPT_STYLES, **prompt_styles}
        panel_styles = get_nested(config_data, "ui", "panel_styles", default=None)
        if isinstance(panel_styles, dict):
            cls.PANEL_STYLES = {**cls.PANEL_STYLES, **panel_styles}
        cls.HIGHLIGHTER_ENABLED = get_nested(
            config_data,
            "ui",
            "highlighter_enabled",
            default=cls.HIGHLIGHTER_ENABLED,
        )
        highlight_styles = get_nested(
            config_data, "ui", "highlight_styles", default=None
        )
        if isinstance(highlight_styles, dict):
            cls.HIGHLIGHT_STYLES = {**cls.HIGHLIGHT_STYLES, **highlight_styles}

        cls.MAN_PAGE_TIMEOUT = get_nested(
            config_data,
            "completion",
            "man_page_timeout",
            default=cls.MAN_PAGE_TIMEOUT,
        )

        return True

    @classmethod
    def _write_default_json_config(cls) -> None:
        config_data = {
            "general": {
                "welcome_message": cls.WELCOME_MESSAGE,
                "show_startup_banner": cls.SHOW_STARTUP_BANNER,
                "log_level": cls.LOG_LEVEL,
            },
            "shell": {
                "history_max_entries": cls.HISTORY_MAX_ENTRIES,
                "executable_suffixes": cls.EXECUTABLE_SUFFIXES,
                "script_suffixes": cls.SCRIPT_SUFFIXES,
                "command_interpreter": cls.COMMAND_INTERPRETER,
                "keywords": sorted(cls.KEYWORDS),
                "default_abbreviations": cls.DEFAULT_ABBREVIATIONS,
            },
            "ui": {
                "input_poll_timeout": cls.INPUT_POLL_TIMEOUT,
                "pager_max_visible": cls.PAGER_MAX_VISIBLE,
                "prompt_styles": cls.PROMPT_STYLES,
                "panel_styles": cls.PANEL_STYLES,
                "highlighter_enabled": cls.HIGHLIGHTER_ENABLED,
                "highlight_styles": cls.HIGHLIGHT_STYLES,
            },
            "completion": {
                "man_page_timeout": cls.MAN_PAGE_TIMEOUT,
            },
        }

        try:
            with cls.CONFIG_JSON_FILE.open("w", encoding="utf-8") as f:
                json.dump(config_data, f, indent=2, ensure_ascii=False)
        except OSError:
            pass

    @classmethod
    def reload(cls) -> bool:
        try:
            cls.ensure_directories()
            cls._load_external_config()
            return True
        except OSError:
            return False


Config._load_external_config()

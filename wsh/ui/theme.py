#!/usr/bin/env python3
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from rich.panel import Panel
from rich.style import Style
from rich.text import Text

from ..config import Config


@dataclass(frozen=True)
class PanelStyle:
    border_style: str
    padding: Optional[tuple] = (0, 1)
    title_style: Optional[str] = None
    title_align: str = "left"
    expand: bool = False

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any], fallback: Mapping[str, Any]) -> "PanelStyle":
        padding = values.get("padding", fallback.get("padding"))
        return cls(
            border_style=values.get("border_style", fallback.get("border_style", "#888888")),
            padding=tuple(padding) if padding is not None else None,
            title_style=values.get("title_style"),
            title_align=values.get("title_align", fallback.get("title_align", "left")),
            expand=values.get("expand", fallback.get("expand", False)),
        )


class PanelTheme:
    @staticmethod
    def get_style(name: str) -> PanelStyle:
        fallback = Config.PANEL_STYLES["default"]
        return PanelStyle.from_mapping(Config.PANEL_STYLES.get(name, fallback), fallback)

    @staticmethod
    def build(
        renderable: Any,
        title: str | Text = "",
        style: str = "default",
        *,
        fit: bool = False,
        **overrides: Any,
    ) -> Panel:
        panel_style = PanelTheme.get_style(style)

        options: Dict[str, Any] = {
            "border_style": panel_style.border_style,
            "title_align": panel_style.title_align,
            "expand": panel_style.expand,
        }
        if panel_style.padding is not None:
            options["padding"] = panel_style.padding
        options.update(overrides)

        if isinstance(title, str) and title and panel_style.title_style:
            title = Text(title, style=panel_style.title_style)

        if fit:
            options.pop("expand", None)
            return Panel.fit(renderable, title=title or None, **options)
        return Panel(renderable, title=title or None, **options)


def prompt_style(name: str) -> Style:
    return Style.parse(Config.PROMPT_STYLES.get(name, "") or "none")

#!/usr/bin/env python3
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple


ESC = "\x1b"


class EscapeState(Enum):
    NORMAL = "normal"
    ESCAPE = "escape"
    CSI = "csi"


class InputClass(Enum):
    ESCAPE = "escape"
    BRACKET = "bracket"
    DIGIT = "digit"
    ENTER = "enter"
    OTHER = "other"


class Action(Enum):
    EMIT = "emit"
    BEGIN_ESCAPE = "begin_escape"
    BEGIN_CSI = "begin_csi"
    CANCEL = "cancel"
    CANCEL_AND_EMIT = "cancel_and_emit"
    ALT_ENTER = "alt_enter"
    REMEMBER = "remember"
    FINAL = "final"


class Key(Enum):
    CHAR = "char"
    ALT_ENTER = "alt_enter"
    UP = "up"
    DOWN = "down"
    RIGHT = "right"
    LEFT = "left"
    SHIFT_TAB = "shift_tab"
    DELETE = "delete"
    CANCEL = "cancel"


@dataclass(frozen=True)
class KeyPress:
    key: Key
    char: Optional[str] = None


TRANSITIONS: Dict[Tuple[EscapeState, InputClass], Tuple[Action, EscapeState]] = {
    (EscapeState.NORMAL, InputClass.ESCAPE): (Action.BEGIN_ESCAPE, EscapeState.ESCAPE),
    (EscapeState.NORMAL, InputClass.BRACKET): (Action.EMIT, EscapeState.NORMAL),
    (EscapeState.NORMAL, InputClass.DIGIT): (Action.EMIT, EscapeState.NORMAL),
    (EscapeState.NORMAL, InputClass.ENTER): (Action.EMIT, EscapeState.NORMAL),
    (EscapeState.NORMAL, InputClass.OTHER): (Action.EMIT, EscapeState.NORMAL),
    (EscapeState.ESCAPE, InputClass.ESCAPE): (Action.CANCEL, EscapeState.ESCAPE),
    (EscapeState.ESCAPE, InputClass.BRACKET): (Action.BEGIN_CSI, EscapeState.CSI),
    (EscapeState.ESCAPE, InputClass.DIGIT): (Action.CANCEL_AND_EMIT, EscapeState.NORMAL),
    (EscapeState.ESCAPE, InputClass.ENTER): (Action.ALT_ENTER, EscapeState.NORMAL),
    (EscapeState.ESCAPE, InputClass.OTHER): (Action.CANCEL_AND_EMIT, EscapeState.NORMAL),
    (EscapeState.CSI, InputClass.ESCAPE): (Action.FINAL, EscapeState.NORMAL),
    (EscapeState.CSI, InputClass.BRACKET): (Action.FINAL, EscapeState.NORMAL),
    (EscapeState.CSI, InputClass.DIGIT): (Action.REMEMBER, EscapeState.CSI),
    (EscapeState.CSI, InputClass.ENTER): (Action.FINAL, EscapeState.NORMAL),
    (EscapeState.CSI, InputClass.OTHER): (Action.FINAL, EscapeState.NORMAL),
}

_FINAL_KEYS = {
    "A": Key.UP,
    "B": Key.DOWN,
    "C": Key.RIGHT,
    "D": Key.LEFT,
    "Z": Key.SHIFT_TAB,
}


def classify(char: str) -> InputClass:
    if char == ESC:
        return InputClass.ESCAPE
    if char == "[":
        return InputClass.BRACKET
    if char.isdigit() and char.isascii():
        return InputClass.DIGIT
    if char in ("\r", "\n"):
        return InputClass.ENTER
    return InputClass.OTHER


class EscapeDecoder:
    """Turns raw terminal characters into key presses, one at a time."""

    def __init__(self) -> None:
        self.state = EscapeState.NORMAL
        self.parameter = ""

    def reset(self) -> None:
        self.state = EscapeState.NORMAL
        self.parameter = ""

    def feed(self, char: str) -> List[KeyPress]:
        action, next_state = TRANSITIONS[(self.state, classify(char))]
        self.state = next_state

        if action is Action.EMIT:
            return [KeyPress(Key.CHAR, char)]
        if action is Action.BEGIN_ESCAPE:
            return []
        if action is Action.BEGIN_CSI:
            self.parameter = ""
            return []
        if action is Action.CANCEL:
            return [KeyPress(Key.CANCEL)]
        if action is Action.CANCEL_AND_EMIT:
            return [KeyPress(Key.CANCEL), KeyPress(Key.CHAR, char)]
        if action is Action.ALT_ENTER:
            return [KeyPress(Key.ALT_ENTER)]
        if action is Action.REMEMBER:
            self.parameter = char
            return []

        parameter, self.parameter = self.parameter, ""
        if char == "~":
            return [KeyPress(Key.DELETE)] if parameter == "3" else []
        key = _FINAL_KEYS.get(char)
        return [KeyPress(key)] if key is not None else []

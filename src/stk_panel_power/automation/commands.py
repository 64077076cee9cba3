"""
Connect Command Module

STK Connect commands are plain text. They are built here as structured
descriptors and only turned into text when sent to the application.

    VO */Satellite/Sat SolarPanel Visualization Radius On 1 AddGroup A View On
    Window3D * SetRenderMethod Method PBuffer WindowID 2
    VO */Satellite/Sat SolarPanel Compute "1 Jan 2020 00:00:00" "1 Jan 2020 01:00:00" 60
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union


Token = Union[str, int, float]


def _format_number(value: Union[int, float]) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def quote(value: str) -> str:
    """Double-quote a token for Connect"""
    return '"' + str(value).replace('"', '') + '"'


def format_token(token: Token) -> str:
    if isinstance(token, bool):
        return "On" if token else "Off"
    if isinstance(token, (int, float)):
        return _format_number(token)
    text = str(token)
    if not text or any(ch.isspace() for ch in text):
        return quote(text)
    return text


@dataclass(frozen=True)
class ConnectCommand:
    """A Connect command: verb, object path and argument tokens"""
    verb: str
    target: str
    arguments: Tuple[Token, ...] = ()

    def serialize(self) -> str:
        parts = [self.verb, self.target]
        parts.extend(format_token(token) for token in self.arguments)
        return " ".join(parts)

    def __str__(self) -> str:
        return self.serialize()


def satellite_path(name: str) -> str:
    """Connect path of a satellite in the current scenario"""
    return f"*/Satellite/{name}"


def add_group_tokens(group_names: Sequence[str]) -> List[str]:
    """One AddGroup token pair per name, in order"""
    tokens: List[str] = []
    for name in group_names:
        tokens.extend(["AddGroup", name])
    return tokens


def solar_panel_visualization(path: str, group_names: Sequence[str],
                              radius: float = 1) -> ConnectCommand:
    """
    Register solar panel groups with the panel tool

    Args:
        path: Connect path of the satellite
        group_names: Group names defined in the model file
        radius: Visualization radius
    """
    if not group_names:
        raise ValueError("At least one solar panel group is required")

    arguments = ["SolarPanel", "Visualization", "Radius", "On", radius]
    arguments.extend(add_group_tokens(group_names))
    arguments.extend(["View", "On"])
    return ConnectCommand("VO", path, tuple(arguments))


def set_render_method(method: str = "PBuffer", window_id: int = 2) -> ConnectCommand:
    return ConnectCommand("Window3D", "*",
                          ("SetRenderMethod", "Method", method, "WindowID", window_id))


def solar_panel_compute(path: str, start: str, stop: str, step_s: float) -> ConnectCommand:
    """Run the solar panel power tool over the analysis window"""
    return ConnectCommand("VO", path,
                          ("SolarPanel", "Compute", start, stop, step_s))

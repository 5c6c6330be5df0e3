"""
Command model - the unit of work sent to a pattern evaluator.

Commands are immutable. They are created from trigger bindings or by
decoding a remote frame, and they carry their own wire discriminator so the
same models serve as the wire format.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field, StrictStr


class Evaluate(BaseModel):
    """
    Compile and schedule a pattern program.

    Wire form: {"type": "evaluate", "sourceText": "..."}
    """

    type: Literal["evaluate"] = "evaluate"
    source_text: StrictStr = Field(..., alias="sourceText", description="Pattern program")

    model_config = {"frozen": True, "populate_by_name": True}

    def __str__(self) -> str:
        return f"Evaluate({self.source_text!r})"


class Stop(BaseModel):
    """
    Silence all active patterns.

    Wire form: {"type": "stop"} - any other fields are ignored.
    """

    type: Literal["stop"] = "stop"

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return "Stop()"


class Notice(BaseModel):
    """Informational frame from the remote side (e.g. the bridge greeting)."""

    type: Literal["message"] = "message"
    text: StrictStr = Field("", description="Notice text")

    model_config = {"frozen": True}


class ErrorNotice(BaseModel):
    """Error report from the remote side (e.g. broadcast lag)."""

    type: Literal["error"] = "error"
    message: StrictStr = Field("", description="Error description")

    model_config = {"frozen": True}


# A command that can reach the evaluator
Command = Annotated[Evaluate | Stop, Field(discriminator="type")]

# Anything that may legitimately arrive on the wire
RemoteMessage = Annotated[
    Evaluate | Stop | Notice | ErrorNotice,
    Field(discriminator="type"),
]


def is_command(message: object) -> bool:
    """Check whether a decoded message is dispatchable."""
    return isinstance(message, (Evaluate, Stop))

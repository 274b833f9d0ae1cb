"""Recorded shell-integration signals.

One model per inbound signal, discriminated on ``method`` and using the
camelCase field names of the wire protocol. Each signal applies itself to a
ShellIntegrationService.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from shelltrack.shell.types import Confidence

if TYPE_CHECKING:
    from shelltrack.shell.service import ShellIntegrationService

UriWire = dict[str, str] | str | None


class SignalModel(BaseModel):
    """Base model for signals with populate_by_name enabled."""

    model_config = ConfigDict(populate_by_name=True)

    instance_id: int = Field(alias="instanceId")

    def apply(self, service: ShellIntegrationService) -> None:
        raise NotImplementedError


class ShellIntegrationChangeSignal(SignalModel):
    method: Literal["shellIntegrationChange"] = "shellIntegrationChange"

    def apply(self, service: ShellIntegrationService) -> None:
        service.shell_integration_change(self.instance_id)


class ShellExecutionStartSignal(SignalModel):
    method: Literal["shellExecutionStart"] = "shellExecutionStart"
    command_line: str = Field(alias="commandLine")
    confidence: Confidence = Confidence.LOW
    is_trusted: bool = Field(default=False, alias="isTrusted")
    cwd: UriWire = None

    def apply(self, service: ShellIntegrationService) -> None:
        service.shell_execution_start(
            self.instance_id, self.command_line, self.confidence, self.is_trusted, self.cwd
        )


class ShellExecutionEndSignal(SignalModel):
    method: Literal["shellExecutionEnd"] = "shellExecutionEnd"
    command_line: str = Field(alias="commandLine")
    confidence: Confidence = Confidence.LOW
    is_trusted: bool = Field(default=False, alias="isTrusted")
    exit_code: int | None = Field(default=None, alias="exitCode")

    def apply(self, service: ShellIntegrationService) -> None:
        service.shell_execution_end(
            self.instance_id, self.command_line, self.confidence, self.is_trusted, self.exit_code
        )


class ShellExecutionDataSignal(SignalModel):
    method: Literal["shellExecutionData"] = "shellExecutionData"
    data: str

    def apply(self, service: ShellIntegrationService) -> None:
        service.shell_execution_data(self.instance_id, self.data)


class ShellEnvChangeSignal(SignalModel):
    method: Literal["shellEnvChange"] = "shellEnvChange"
    env_keys: list[str] = Field(alias="keys")
    env_values: list[str | None] = Field(alias="values")
    is_trusted: bool = Field(default=False, alias="isTrusted")

    def apply(self, service: ShellIntegrationService) -> None:
        service.shell_env_change(self.instance_id, self.env_keys, self.env_values, self.is_trusted)


class CwdChangeSignal(SignalModel):
    method: Literal["cwdChange"] = "cwdChange"
    cwd: UriWire = None

    def apply(self, service: ShellIntegrationService) -> None:
        service.cwd_change(self.instance_id, self.cwd)


class SetHasRichCommandDetectionSignal(SignalModel):
    method: Literal["setHasRichCommandDetection"] = "setHasRichCommandDetection"
    value: bool

    def apply(self, service: ShellIntegrationService) -> None:
        service.set_has_rich_command_detection(self.instance_id, self.value)


class CloseTerminalSignal(SignalModel):
    method: Literal["closeTerminal"] = "closeTerminal"

    def apply(self, service: ShellIntegrationService) -> None:
        service.close_terminal(self.instance_id)


Signal = Annotated[
    ShellIntegrationChangeSignal
    | ShellExecutionStartSignal
    | ShellExecutionEndSignal
    | ShellExecutionDataSignal
    | ShellEnvChangeSignal
    | CwdChangeSignal
    | SetHasRichCommandDetectionSignal
    | CloseTerminalSignal,
    Field(discriminator="method"),
]


class RecordedSignal(BaseModel):
    """One line of a recording: a timestamp and the signal."""

    model_config = ConfigDict(populate_by_name=True)

    ts: float = 0.0
    signal: Signal

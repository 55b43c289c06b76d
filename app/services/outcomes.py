# result variants for calls to external capabilities
# text analysis: Ok | ConfigAbsent | MalformedResponse | ProviderError
# push delivery: Delivered | InvalidToken | TransientFailure

from dataclasses import dataclass, field
from typing import Any, Union


# text analysis

@dataclass(frozen=True)
class Ok:
    value: Any


@dataclass(frozen=True)
class ConfigAbsent:
    capability: str


@dataclass(frozen=True)
class MalformedResponse:
    raw: str
    reason: str


@dataclass(frozen=True)
class ProviderError:
    code: str
    message: str = ""


CompletionOutcome = Union[Ok, ConfigAbsent, MalformedResponse, ProviderError]


# push delivery

@dataclass(frozen=True)
class Delivered:
    message_id: str
    kind: str = field(default="delivered", init=False)


@dataclass(frozen=True)
class InvalidToken:
    code: str
    kind: str = field(default="invalid-token", init=False)


@dataclass(frozen=True)
class TransientFailure:
    reason: str
    kind: str = field(default="transient-failure", init=False)


DeliveryOutcome = Union[Delivered, InvalidToken, TransientFailure]

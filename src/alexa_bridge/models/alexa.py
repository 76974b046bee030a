"""Alexa Skill request/response models."""

from typing import Any, Literal

from pydantic import BaseModel, field_validator


def _text_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _mapping_or_none(value: Any) -> dict[str, Any] | None:
    return value if isinstance(value, dict) else None


class AlexaSlot(BaseModel):
    """Alexa slot value.

    ``value`` is kept as sent; non-string values are stringified when the
    query is extracted.
    """

    name: str = ""
    value: Any = None

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""


class AlexaIntent(BaseModel):
    """Alexa intent with slots."""

    name: str = ""
    slots: dict[str, AlexaSlot] = {}

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("slots", mode="before")
    @classmethod
    def coerce_slots(cls, value: Any) -> dict[str, Any]:
        # Drop malformed entries instead of rejecting the whole request
        if not isinstance(value, dict):
            return {}
        return {name: slot for name, slot in value.items() if isinstance(slot, dict)}


class AlexaRequest(BaseModel):
    """Alexa request payload."""

    type: str = ""
    intent: AlexaIntent | None = None
    locale: str | None = None
    timestamp: str | None = None

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    coerce_intent = field_validator("intent", mode="before")(_mapping_or_none)
    coerce_strings = field_validator("locale", "timestamp", mode="before")(_text_or_none)


class AlexaUser(BaseModel):
    """Alexa user identity."""

    userId: str | None = None

    coerce_strings = field_validator("userId", mode="before")(_text_or_none)


class AlexaSession(BaseModel):
    """Alexa session information."""

    sessionId: str | None = None
    new: bool = True
    user: AlexaUser | None = None

    coerce_strings = field_validator("sessionId", mode="before")(_text_or_none)
    coerce_user = field_validator("user", mode="before")(_mapping_or_none)

    @field_validator("new", mode="before")
    @classmethod
    def coerce_new(cls, value: Any) -> bool:
        return value if isinstance(value, bool) else True


class AlexaRequestEnvelope(BaseModel):
    """Full Alexa request envelope.

    Parsing is lenient: any field of the wrong type falls back to its
    default so the request can still be routed.
    """

    version: str = "1.0"
    session: AlexaSession | None = None
    request: AlexaRequest = AlexaRequest()
    context: dict[str, Any] = {}

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version(cls, value: Any) -> str:
        return value if isinstance(value, str) else "1.0"

    coerce_session = field_validator("session", mode="before")(_mapping_or_none)

    @field_validator("request", "context", mode="before")
    @classmethod
    def coerce_mapping(cls, value: Any) -> dict[str, Any]:
        return value if isinstance(value, dict) else {}

    @property
    def request_type(self) -> str:
        return self.request.type

    @property
    def intent_name(self) -> str:
        return self.request.intent.name if self.request.intent else ""

    @property
    def session_id(self) -> str | None:
        return self.session.sessionId if self.session else None

    @property
    def user_id(self) -> str | None:
        if self.session and self.session.user:
            return self.session.user.userId
        return None

    def slot_value(self, names: list[str]) -> str:
        """Return the first non-empty slot value among ``names``, trimmed."""
        if not self.request.intent:
            return ""
        slots = self.request.intent.slots
        for name in names:
            slot = slots.get(name)
            if slot is None or slot.value is None:
                continue
            value = str(slot.value).strip()
            if value:
                return value
        return ""


class AlexaOutputSpeech(BaseModel):
    """Alexa speech output, either SSML or plain text."""

    type: Literal["SSML", "PlainText"] = "PlainText"
    text: str | None = None
    ssml: str | None = None


class AlexaReprompt(BaseModel):
    """Speech used when the user stays silent with the session open."""

    outputSpeech: AlexaOutputSpeech


class AlexaResponseBody(BaseModel):
    """Alexa response body."""

    outputSpeech: AlexaOutputSpeech
    reprompt: AlexaReprompt | None = None
    shouldEndSession: bool = True


class AlexaResponse(BaseModel):
    """Full Alexa response envelope."""

    version: str = "1.0"
    response: AlexaResponseBody

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the wire, dropping unset optional fields."""
        return self.model_dump(exclude_none=True)

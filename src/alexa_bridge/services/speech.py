"""Alexa speech envelope builders and fixed skill messages."""

from html import escape
from typing import Any

from ..models.alexa import AlexaOutputSpeech, AlexaReprompt, AlexaResponse, AlexaResponseBody

MESSAGES: dict[str, dict[str, str]] = {
    "pt": {
        "launch": "Oi! O que você quer saber?",
        "reprompt": "Quer perguntar mais alguma coisa?",
        "ask_query": "Não entendi a pergunta. O que você quer saber?",
        "not_understood": "Desculpe, não entendi.",
        "no_answer": "Desculpe, não encontrei uma resposta.",
        "not_configured": "Desculpe, o serviço não está configurado.",
        "error": "Desculpe, houve um erro ao processar sua pergunta.",
        "invalid_request": "Requisição inválida.",
        "unverified": "Desculpe, não foi possível validar a requisição.",
    },
    "en": {
        "launch": "Hi! What would you like to know?",
        "reprompt": "Do you want to ask anything else?",
        "ask_query": "I didn't catch the question. What would you like to know?",
        "not_understood": "Sorry, I didn't understand that.",
        "no_answer": "Sorry, I couldn't find an answer.",
        "not_configured": "Sorry, this service is not configured.",
        "error": "Sorry, something went wrong while processing your question.",
        "invalid_request": "Invalid request.",
        "unverified": "Sorry, this request could not be verified.",
    },
}


def language_for(locale: str | None, default: str) -> str:
    """Pick a message language from an Alexa locale such as ``pt-BR``."""
    if locale:
        language = locale.split("-")[0].lower()
        if language in MESSAGES:
            return language
    return default if default in MESSAGES else "en"


def message(key: str, language: str) -> str:
    return MESSAGES.get(language, MESSAGES["en"])[key]


def to_ssml(text: str) -> str:
    """Wrap text in a ``<speak>`` document, escaping XML special characters.

    Text that is already a complete ``<speak>`` document is kept as is.
    """
    text = text.strip()
    if text.startswith("<speak>") and text.endswith("</speak>"):
        return text
    return f"<speak>{escape(text, quote=False)}</speak>"


def build_response(
    speech: str,
    should_end: bool = True,
    reprompt: str | None = None,
) -> dict[str, Any]:
    """Build an SSML Alexa response, with a plain-text reprompt when the session stays open."""
    body = AlexaResponseBody(
        outputSpeech=AlexaOutputSpeech(type="SSML", ssml=to_ssml(speech)),
        shouldEndSession=should_end,
    )

    if reprompt and not should_end:
        body.reprompt = AlexaReprompt(outputSpeech=AlexaOutputSpeech(type="PlainText", text=reprompt))

    return AlexaResponse(response=body).to_dict()


def build_message_response(key: str, language: str, should_end: bool = True) -> dict[str, Any]:
    """Build a response speaking one of the fixed skill messages."""
    return build_response(
        message(key, language),
        should_end=should_end,
        reprompt=None if should_end else message("reprompt", language),
    )

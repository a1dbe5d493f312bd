# storefront/chat.py
"""
FAQ chat widget. Answers come from a remote endpoint when ``CHAT_URL`` is
set, otherwise (or when that endpoint fails) from a keyword script.
"""
import itertools
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

import requests

from .config import CHAT_URL, REQUEST_TIMEOUT
from .errors import HttpError, MalformedResponseError, NetworkError, StorefrontError

logger = logging.getLogger(__name__)

GREETING = (
    "Hello! Welcome to Hrayfi. How can I help you find the perfect "
    "Moroccan artisan product today?"
)

# First matching rule wins; order matters ("hi" is inside "shipping").
SCRIPT = [
    (("rug", "textile"),
     "Our rugs and textiles are handwoven by skilled artisans from regions like Azilal and Beni Ourain. "
     "Each piece tells a unique story through its patterns and colors. Would you like to know more about a specific style?"),
    (("pottery", "ceramic"),
     "Moroccan pottery, especially from Tamegroute and Fez, has been crafted for centuries using traditional techniques. "
     "The distinctive green glaze of Tamegroute pottery comes from copper found in local mountains. "
     "What type of pottery interests you?"),
    (("price", "cost"),
     "Our prices reflect the authentic craftsmanship and quality materials used. Each piece is fairly priced to "
     "support our artisan partners. You can find detailed pricing on each product page."),
    (("shipping", "delivery"),
     "We offer worldwide shipping with careful packaging to ensure your handcrafted items arrive safely. "
     "Shipping times vary by location, typically 5-14 business days internationally."),
    (("artisan", "maker"),
     "We work directly with artisan cooperatives and individual craftspeople across Morocco. Each product page "
     "includes information about the artisan and their region. This ensures fair trade and authentic craftsmanship."),
    (("hello", "hi"),
     "Hello! I'm here to help you discover the beauty of Moroccan craftsmanship. Are you looking for something "
     "specific, or would you like recommendations?"),
]

FALLBACK = (
    "Thank you for your question! I'd be happy to help you learn more about our authentic Moroccan crafts. "
    "You can browse our categories or ask me about specific products, artisans, or regions."
)


def scripted_answer(text: str) -> str:
    lowered = text.lower()
    for keywords, answer in SCRIPT:
        if any(k in lowered for k in keywords):
            return answer
    return FALLBACK


class ChatClient:
    """POST ``{"user_prompt": ...}`` and read back ``{"answer": ...}``."""

    def __init__(self, url: str = CHAT_URL, http=None, timeout: int = REQUEST_TIMEOUT):
        self.url = url
        self.http = http if http is not None else requests.Session()
        self.timeout = timeout

    def ask(self, prompt: str) -> str:
        try:
            resp = self.http.request("POST", self.url, json={"user_prompt": prompt}, timeout=self.timeout)
        except requests.RequestException as e:
            raise NetworkError(f"Chat service unreachable: {e}") from e
        if not resp.ok:
            raise HttpError(resp.status_code, resp.reason)
        try:
            answer = resp.json().get("answer")
        except (ValueError, AttributeError):
            answer = None
        if not isinstance(answer, str) or not answer.strip():
            raise MalformedResponseError("chat response has no answer")
        return answer.strip()


@dataclass
class Message:
    id: int
    text: str
    is_user: bool
    timestamp: datetime = field(default_factory=datetime.now)


class ChatWidget:
    def __init__(self, answerer: Optional[Callable[[str], str]] = None):
        self.answerer = answerer
        self._ids = itertools.count(1)
        self.messages: List[Message] = [Message(next(self._ids), GREETING, False)]
        self.is_open = False

    def _answer(self, text: str) -> str:
        if self.answerer is None:
            return scripted_answer(text)
        try:
            return self.answerer(text)
        except StorefrontError as e:
            logger.warning("Remote chat failed, answering from script: %s", e)
            return scripted_answer(text)

    def send(self, text: str) -> Optional[Message]:
        """Append the user's message and the reply; blank input is ignored."""
        if not text or not text.strip():
            return None
        self.messages.append(Message(next(self._ids), text, True))
        reply = Message(next(self._ids), self._answer(text), False)
        self.messages.append(reply)
        return reply


def default_widget() -> ChatWidget:
    return ChatWidget(ChatClient().ask if CHAT_URL else None)

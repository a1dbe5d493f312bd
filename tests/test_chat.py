import pytest
import requests

from conftest import FakeResponse
from storefront.chat import FALLBACK, GREETING, ChatClient, ChatWidget, scripted_answer
from storefront.errors import HttpError, MalformedResponseError, NetworkError


@pytest.mark.parametrize("text,fragment", [
    ("Do you sell RUGS?", "handwoven"),
    ("tell me about ceramic bowls", "Tamegroute"),
    ("what does it cost", "fairly priced"),
    ("how long is shipping?", "worldwide shipping"),
    ("who are the makers", "cooperatives"),
    ("hello there", "Moroccan craftsmanship"),
])
def test_scripted_answers(text, fragment):
    assert fragment in scripted_answer(text)


def test_unknown_question_gets_fallback():
    assert scripted_answer("opening hours?") == FALLBACK


def test_widget_starts_with_greeting_and_ignores_blank_input():
    widget = ChatWidget()
    assert [m.text for m in widget.messages] == [GREETING]
    assert widget.send("   ") is None
    assert len(widget.messages) == 1


def test_widget_appends_user_and_bot_messages():
    widget = ChatWidget(lambda prompt: f"echo: {prompt}")
    reply = widget.send("pottery?")
    assert reply.text == "echo: pottery?"
    assert [m.is_user for m in widget.messages] == [False, True, False]
    assert len({m.id for m in widget.messages}) == 3


def test_widget_falls_back_to_script_when_remote_fails():
    def broken(prompt):
        raise NetworkError("down")

    widget = ChatWidget(broken)
    assert "worldwide shipping" in widget.send("delivery times?").text


class FakeChatHttp:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


def test_chat_client_posts_user_prompt():
    http = FakeChatHttp(FakeResponse(200, {"answer": " Yes, we ship. "}))
    client = ChatClient("http://chat.test/ask", http=http)
    assert client.ask("do you ship?") == "Yes, we ship."
    method, url, kwargs = http.calls[0]
    assert (method, url) == ("POST", "http://chat.test/ask")
    assert kwargs["json"] == {"user_prompt": "do you ship?"}


@pytest.mark.parametrize("response,error", [
    (FakeResponse(502), HttpError),
    (FakeResponse(200, {"reply": "?"}), MalformedResponseError),
    (requests.ConnectionError("refused"), NetworkError),
])
def test_chat_client_errors(response, error):
    with pytest.raises(error):
        ChatClient("http://chat.test/ask", http=FakeChatHttp(response)).ask("hi")

"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx

from passkey_relay.adapters.telegram_client import HttpxTelegramClient
from passkey_relay.adapters.whatsapp_client import HttpxWhatsAppClient


def test_telegram_client_send_and_callback() -> None:
    payloads: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/sendMessage") or request.url.path.endswith(
            "/answerCallbackQuery"
        )
        payloads.append(json.loads(request.content.decode()))
        return httpx.Response(200, json={"ok": True, "result": {}})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxTelegramClient(bot_token="token", http_client=async_client)

    asyncio.run(client.send_message(chat_id="42", text="Hi", parse_mode="Markdown"))
    asyncio.run(client.answer_callback_query(callback_query_id="cbq-1"))

    assert payloads[0] == {"chat_id": "42", "text": "Hi", "parse_mode": "Markdown"}
    assert payloads[1] == {"callback_query_id": "cbq-1"}


def test_telegram_client_commands_and_menu_button() -> None:
    seen_paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen_paths.append(request.url.path)
        payload = json.loads(request.content.decode())
        if request.url.path.endswith("/setMyCommands"):
            assert payload["commands"][0]["command"] == "start"
        if request.url.path.endswith("/setChatMenuButton"):
            assert payload["menu_button"]["type"] == "commands"
        return httpx.Response(200, json={"ok": True, "result": True})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxTelegramClient(bot_token="token", http_client=async_client)

    asyncio.run(
        client.set_my_commands(
            [{"command": "start", "description": "Request access to the bot"}]
        )
    )
    asyncio.run(client.set_chat_menu_button({"type": "commands"}))

    assert any(path.endswith("/setMyCommands") for path in seen_paths)
    assert any(path.endswith("/setChatMenuButton") for path in seen_paths)


def test_telegram_client_get_updates_passes_offset() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/bottoken/getUpdates"
        payload = json.loads(request.content.decode())
        assert payload["offset"] == 11
        assert payload["timeout"] == 5
        return httpx.Response(200, json={"ok": True, "result": [{"update_id": 11}]})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxTelegramClient(bot_token="token", http_client=async_client)

    updates = asyncio.run(client.get_updates(offset=11, timeout=5))

    assert updates == [{"update_id": 11}]


def test_whatsapp_client_sends_text_and_buttons() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"messages": [{"id": "wamid.1"}]})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxWhatsAppClient(
        access_token="wa-token",
        phone_number_id="12345",
        http_client=async_client,
        base_url="https://graph.test/v20.0",
    )

    asyncio.run(client.send_text("15550001", "hello"))
    asyncio.run(
        client.send_buttons("15550001", "choose", [("send_passkey_1", "Send")])
    )

    assert requests[0].url.path == "/v20.0/12345/messages"
    assert requests[0].headers["Authorization"] == "Bearer wa-token"
    text_payload = json.loads(requests[0].content.decode())
    assert text_payload == {
        "messaging_product": "whatsapp",
        "to": "15550001",
        "type": "text",
        "text": {"body": "hello"},
    }
    button_payload = json.loads(requests[1].content.decode())
    assert button_payload["interactive"]["action"]["buttons"] == [
        {"type": "reply", "reply": {"id": "send_passkey_1", "title": "Send"}}
    ]

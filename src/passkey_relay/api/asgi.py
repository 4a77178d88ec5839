"""ASGI entrypoint for the passkey relay webhooks."""

from passkey_relay.api.app import create_app
from passkey_relay.containers import build_container

app = create_app(build_container())

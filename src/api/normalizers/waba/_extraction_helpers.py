"""Extração do envelope Graph API (entry -> changes -> value)."""

from __future__ import annotations

from typing import Any

from api.normalizers._helpers import (
    as_dict,
    as_float,
    as_list,
    as_str,
    build_vcard,
    first_dict,
)
from app.domain import ContactContent, LocationContent, MessageContent, ReplyContent

INTERACTIVE_PLACEHOLDER = "[Interactive Message]"
UNSUPPORTED_PLACEHOLDER = "[Mensagem não suportada]"


def extract_value(payload: dict[str, Any]) -> dict[str, Any]:
    """`entry[0].changes[0].value` ou {}."""
    entry = first_dict(payload.get("entry"))
    change = first_dict(entry.get("changes"))
    return as_dict(change.get("value"))


def extract_phone_number_id(value: dict[str, Any]) -> str | None:
    return as_str(as_dict(value.get("metadata")).get("phone_number_id"))


def extract_display_phone(value: dict[str, Any]) -> str | None:
    return as_str(as_dict(value.get("metadata")).get("display_phone_number"))


def extract_profile_name(value: dict[str, Any]) -> str | None:
    contact = first_dict(value.get("contacts"))
    return as_str(as_dict(contact.get("profile")).get("name"))


def extract_location(message: dict[str, Any]) -> MessageContent:
    location = as_dict(message.get("location"))
    return MessageContent(
        type="location",
        location=LocationContent(
            latitude=as_float(location.get("latitude")) or 0.0,
            longitude=as_float(location.get("longitude")) or 0.0,
            name=as_str(location.get("name")),
            address=as_str(location.get("address")),
        ),
    )


def extract_contacts(message: dict[str, Any]) -> MessageContent:
    """Um ContactContent por contato, com vCard sintetizado dos telefones."""
    contacts: list[ContactContent] = []
    for item in as_list(message.get("contacts")):
        contact = as_dict(item)
        name = as_str(as_dict(contact.get("name")).get("formatted_name")) or ""
        phones = [
            as_str(as_dict(phone).get("phone")) or ""
            for phone in as_list(contact.get("phones"))
            if as_dict(phone).get("phone")
        ]
        contacts.append(ContactContent(name=name, vcard=build_vcard(name, phones)))
    return MessageContent(type="contacts", contacts=contacts)


def extract_interactive(message: dict[str, Any]) -> MessageContent:
    """button_reply/list_reply viram texto + reply apontando o id da opção."""
    interactive = as_dict(message.get("interactive"))
    kind = interactive.get("type")
    if kind in ("button_reply", "list_reply"):
        option = as_dict(interactive.get(kind))
        option_id = as_str(option.get("id")) or ""
        return MessageContent(
            type="text",
            text=as_str(option.get("title")) or "",
            reply=ReplyContent(
                message_id=option_id,
                quoted_message=MessageContent(type="text", text=option_id),
            ),
        )
    return MessageContent(type="text", text=INTERACTIVE_PLACEHOLDER)


def extract_button(message: dict[str, Any]) -> MessageContent:
    """Quick reply de template (`type: button`)."""
    button = as_dict(message.get("button"))
    payload = as_str(button.get("payload")) or ""
    return MessageContent(
        type="text",
        text=as_str(button.get("text")) or "",
        reply=ReplyContent(
            message_id=as_str(as_dict(message.get("context")).get("id")),
            quoted_message=MessageContent(type="text", text=payload),
        ),
    )

"""
Chat Context Builder — What the Assistant Sees
===============================================
Turns the team chat log into the role-tagged transcript handed to the
conversational model.

Rules:
    1. Every prior message becomes one turn, oldest first.
    2. AI-authored messages are tagged ``model``; everyone else is ``user``.
    3. Turn text is ``"<sender>: <content>"`` so the model can tell team
       members apart inside the single ``user`` role.
    4. The outgoing message is appended last as a ``user`` turn, attributed
       to the current user's display name.

The transcript is rebuilt in full on every send. There is no incremental
cache to drift out of sync with the log.
"""

from __future__ import annotations

import re
from typing import Iterable

from neurotech.models import ChatTurn, Message, ROLE_MODEL, ROLE_USER

AI_MENTION = "@ai"
AI_SENDER = "Neurotech AI"

_MENTION_RE = re.compile(re.escape(AI_MENTION), re.IGNORECASE)


def format_turn_text(sender: str, content: str) -> str:
    return f"{sender}: {content}"


def turn_for_message(message: Message) -> ChatTurn:
    role = ROLE_MODEL if message.is_ai else ROLE_USER
    return ChatTurn(role=role, text=format_turn_text(message.sender, message.content))


def build_transcript(messages: Iterable[Message], new_message: str, sender: str) -> list[ChatTurn]:
    """Build the full transcript for one assistant call.

    Args:
        messages: The chat log, oldest first.
        new_message: Text the current user is sending now.
        sender: Display name of the current user.

    Returns:
        One turn per prior message followed by the outgoing user turn.
    """
    turns = [turn_for_message(m) for m in messages]
    turns.append(ChatTurn(role=ROLE_USER, text=format_turn_text(sender, new_message)))
    return turns


def mentions_ai(text: str) -> bool:
    """True when the message invokes the assistant (``@AI``, any case)."""
    return bool(_MENTION_RE.search(text))

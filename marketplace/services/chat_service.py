"""Chat collaborator - conversation channels between two users."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from marketplace.db.models import Chat


def get_chat(db: Session, chat_id: int) -> Chat | None:
    return db.get(Chat, chat_id)


def find_chat(db: Session, user_a: int, user_b: int) -> Chat | None:
    low, high = sorted((user_a, user_b))
    return db.execute(
        select(Chat).where(Chat.user_low_id == low, Chat.user_high_id == high)
    ).scalar_one_or_none()


def create_chat(db: Session, user_a: int, user_b: int) -> int:
    """
    Return the chat id for a user pair, creating the chat if needed.

    Flushes but does not commit; the caller owns the transaction.
    """
    existing = find_chat(db, user_a, user_b)
    if existing:
        return existing.id

    low, high = sorted((user_a, user_b))
    chat = Chat(user_low_id=low, user_high_id=high)
    db.add(chat)
    db.flush()
    return chat.id

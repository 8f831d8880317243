from typing import Optional

from pydantic import BaseModel, Field


class TelegramUser(BaseModel):
    id: int
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class TelegramChat(BaseModel):
    id: int
    type: str


class TelegramMessage(BaseModel):
    message_id: int
    chat: TelegramChat
    from_: Optional[TelegramUser] = Field(None, alias="from")
    text: Optional[str] = None
    caption: Optional[str] = None

    class Config:
        populate_by_name = True


class TelegramUpdate(BaseModel):
    """텔레그램 webhook Update (필요한 필드만)"""

    update_id: Optional[int] = None
    message: Optional[TelegramMessage] = None

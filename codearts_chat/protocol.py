from pydantic import BaseModel, Field
from typing import Literal, Optional

class SendMessage(BaseModel):
    type: Literal["send_message"]
    text: str = Field(min_length=1)
    id: Optional[str] = None

class Pong(BaseModel):
    type: Literal["pong"]

class ChatMessage(BaseModel):
    type: Literal["message"]
    sender: Literal["user", "assistant", "system"]
    text: str
    timestamp: str

class Ack(BaseModel):
    type: Literal["ack"]
    id: str
    status: Literal["sent", "error"]
    error: Optional[str] = None

class ErrorMsg(BaseModel):
    type: Literal["error"]
    message: str

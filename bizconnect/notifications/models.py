from typing import Literal

from pydantic import BaseModel

class Notification(BaseModel):
    title: str
    description: str
    variant: Literal["default", "destructive"] = "default"

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Interest(str, Enum):
    ATTENDING = "attending"
    VENDOR = "vendor"
    ORGANISING = "organising"
    VENUE = "venue"


class SubscribeRequest(BaseModel):
    # El email se valida en el servicio para devolver 400 con el mensaje del formulario
    email: Optional[str] = None
    interests: Optional[List[Interest]] = None


class SubscribeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str
    already_subscribed: bool = Field(False, alias="alreadySubscribed")
    demo: Optional[bool] = None


class ErrorResponse(BaseModel):
    success: bool = False
    message: str


class SubscriberOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    email: str
    interests: List[Interest] = []
    subscribed_at: datetime = Field(..., alias="subscribedAt")
    source: str


class SubscribersListResponse(BaseModel):
    success: bool = True
    count: int
    subscribers: List[SubscriberOut]


class SelfTestResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str
    test_result: Optional[SubscribeResponse] = Field(None, alias="testResult")
    error: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    message: str
    database: str
    database_connected: bool
    database_url_configured: bool
    timestamp: datetime

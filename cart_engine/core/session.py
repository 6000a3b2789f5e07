"""Session management for cart engines"""

import uuid
import logging
from datetime import datetime, timezone
from typing import Callable, Optional
from dataclasses import dataclass, field

from ..models.cart import CartView
from ..services.cart_engine import CartEngine
from ..services.store_client import CartStoreClient
from .config import Settings

logger = logging.getLogger(__name__)

StoreClientFactory = Callable[[str], CartStoreClient]


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CartSession:
    """One authenticated shopper and their cart engine"""
    session_id: str
    token: str
    created_at: datetime
    updated_at: datetime
    engine: Optional[CartEngine] = None
    messages: list = field(default_factory=list)
    redirect: Optional[str] = None
    max_messages: int = 20

    def notify(self, level: str, message: str) -> None:
        """Queue a toast for the next response"""
        self.messages.append({"level": level, "message": message})
        del self.messages[:-self.max_messages]
        self.updated_at = _now()

    def require_login(self, login_path: str) -> None:
        self.redirect = login_path

    def drain_messages(self) -> list[str]:
        drained = [f"{m['level']}: {m['message']}" for m in self.messages]
        self.messages.clear()
        return drained

    def view(self) -> CartView:
        """Engine snapshot plus queued toasts and any pending redirect"""
        self.updated_at = _now()
        redirect, self.redirect = self.redirect, None
        return self.engine.view(messages=self.drain_messages(), redirect=redirect)


class SessionManager:
    """Manages cart sessions"""

    def __init__(self, settings: Settings, client_factory: Optional[StoreClientFactory] = None):
        self.settings = settings
        self.sessions: dict[str, CartSession] = {}
        self._client_factory = client_factory or self._default_client

    def _default_client(self, token: str) -> CartStoreClient:
        return CartStoreClient(
            store_base_url=self.settings.store_base_url,
            token=token,
            timeout=self.settings.request_timeout,
        )

    def create_session(self, token: str) -> CartSession:
        """Create a new session for a bearer token"""
        now = _now()
        session = CartSession(
            session_id=str(uuid.uuid4()),
            token=token,
            created_at=now,
            updated_at=now,
            max_messages=self.settings.max_messages,
        )
        session.engine = CartEngine(
            store=self._client_factory(token),
            free_shipping_threshold=self.settings.free_shipping_threshold,
            shipping_fee=self.settings.shipping_fee,
            notify=session.notify,
            on_auth_required=session.require_login,
            login_path=self.settings.login_path,
        )
        self.sessions[session.session_id] = session
        return session

    def get_session(self, session_id: str) -> Optional[CartSession]:
        """Get session by ID"""
        return self.sessions.get(session_id)

    async def delete_session(self, session_id: str) -> bool:
        """Delete a session and close its store client"""
        session = self.sessions.pop(session_id, None)
        if session is None:
            return False
        await session.engine.store.close()
        return True

    async def cleanup_old_sessions(self, max_age_hours: Optional[int] = None) -> int:
        """Remove sessions idle for longer than max_age_hours"""
        max_age_hours = max_age_hours or self.settings.session_max_age_hours
        now = _now()
        old_sessions = [
            sid for sid, session in self.sessions.items()
            if (now - session.updated_at).total_seconds() > max_age_hours * 3600
        ]
        for sid in old_sessions:
            await self.delete_session(sid)
        if old_sessions:
            logger.info(f"Removed {len(old_sessions)} idle cart sessions")
        return len(old_sessions)

    async def close(self) -> None:
        for sid in list(self.sessions):
            await self.delete_session(sid)

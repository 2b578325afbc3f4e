"""Client session value.

Constructed once at startup from a ``KeyValueStore`` and handed to the
conversation state and transport, instead of each of them reading storage.
"""

from dataclasses import dataclass

from loguru import logger

from .storage import KeyValueStore

TOKEN_KEY = "token"
USER_KEY = "user"
THEME_KEY = "theme"


@dataclass
class UserProfile:
    id: str
    name: str


@dataclass
class ClientSession:
    """Credential, user profile and theme of the person using this client."""

    token: str | None = None
    user: UserProfile | None = None
    theme: str = "dark"

    @property
    def authenticated(self) -> bool:
        return bool(self.token)

    @classmethod
    def load(cls, store: KeyValueStore) -> "ClientSession":
        user = None
        raw_user = store.get(USER_KEY)
        if raw_user:
            try:
                user = UserProfile(id=str(raw_user["id"]), name=str(raw_user["name"]))
            except (KeyError, TypeError):
                logger.warning("Ignoring malformed stored user profile")
        return cls(
            token=store.get(TOKEN_KEY),
            user=user,
            theme=store.get(THEME_KEY) or "dark",
        )

    def save(self, store: KeyValueStore) -> None:
        if self.token:
            store.set(TOKEN_KEY, self.token)
        else:
            store.delete(TOKEN_KEY)
        if self.user:
            store.set(USER_KEY, {"id": self.user.id, "name": self.user.name})
        else:
            store.delete(USER_KEY)
        store.set(THEME_KEY, self.theme)

    def logout(self, store: KeyValueStore) -> None:
        self.token = None
        self.user = None
        store.delete(TOKEN_KEY)
        store.delete(USER_KEY)

    def toggle_theme(self, store: KeyValueStore) -> str:
        self.theme = "light" if self.theme == "dark" else "dark"
        store.set(THEME_KEY, self.theme)
        return self.theme

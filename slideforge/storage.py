from __future__ import annotations

import hashlib
import hmac
import json
import logging
import os
import secrets
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from pydantic import ValidationError as PydanticValidationError

from slideforge.errors import NotFound, PersistenceWriteFailure
from slideforge.models import Presentation, PresentationMeta, User, new_id
from slideforge.normalize import normalize_presentation

logger = logging.getLogger(__name__)

PRESENTATIONS_KEY = "presentations"
USERS_KEY = "users"
SESSION_KEY = "currentUser"
PASSWORD_KEY_PREFIX = "user_pass_"

_PBKDF2_ITERATIONS = 240_000


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


@dataclass
class MemoryStore:
    data: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


@dataclass(frozen=True)
class FileStore:
    base_dir: str

    def _path_for_key(self, key: str) -> str:
        digest = hashlib.sha1(key.encode("utf-8")).hexdigest()  # nosec
        subdir = os.path.join(self.base_dir, "kv", digest[:2])
        os.makedirs(subdir, exist_ok=True)
        return os.path.join(subdir, f"{digest}.json")

    def get(self, key: str) -> str | None:
        path = self._path_for_key(key)
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def set(self, key: str, value: str) -> None:
        path = self._path_for_key(key)
        tmp_path = f"{path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(value)
        os.replace(tmp_path, path)

    def remove(self, key: str) -> None:
        path = self._path_for_key(key)
        if os.path.exists(path):
            os.remove(path)


def hash_password(password: str, *, salt: str | None = None) -> str:
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), _PBKDF2_ITERATIONS)
    return f"pbkdf2_sha256${_PBKDF2_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, stored: str | None) -> bool:
    if not stored:
        return False
    try:
        scheme, iterations, salt, expected = stored.split("$", 3)
        rounds = int(iterations)
    except ValueError:
        return False
    if scheme != "pbkdf2_sha256":
        return False
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), rounds)
    return hmac.compare_digest(digest.hex(), expected)


class PersistenceService:
    """Load/save/delete presentations and users against a key-value store.

    Collections are stored whole under fixed keys. Every write is a
    read-all, replace-one, write-all sequence held under one lock, and the
    last writer wins.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store
        self._lock = threading.RLock()

    # --- raw document access ---

    def _read_collection(self, key: str) -> list[Any]:
        raw = self.store.get(key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except (ValueError, RecursionError):
            logger.warning("Stored %r is not valid JSON; treating as empty",
                           key, exc_info=True)
            return []
        if not isinstance(data, list):
            logger.warning("Stored %r is not a list; treating as empty", key)
            return []
        return data

    def _write(self, key: str, payload: Any) -> None:
        try:
            self.store.set(key, json.dumps(payload, ensure_ascii=False))
        except Exception as e:
            logger.error("Writing %r to the store failed: %s", key, e)
            raise PersistenceWriteFailure(
                f"Could not save {key}: {e}") from e

    def _remove(self, key: str) -> None:
        try:
            self.store.remove(key)
        except Exception as e:
            logger.error("Removing %r from the store failed: %s", key, e)
            raise PersistenceWriteFailure(
                f"Could not remove {key}: {e}") from e

    # --- presentations ---

    def _load_presentations(self) -> list[Presentation]:
        rows = self._read_collection(PRESENTATIONS_KEY)
        return [
            normalize_presentation(row)
            for row in rows
            if isinstance(row, Mapping) and row.get("id")
        ]

    def list_presentations(self, user_id: str) -> list[Presentation]:
        return [p for p in self._load_presentations() if p.user_id == user_id]

    def list_presentation_meta(self, user_id: str) -> list[PresentationMeta]:
        return [p.meta() for p in self.list_presentations(user_id)]

    def get_presentation(self, presentation_id: str) -> Presentation | None:
        for p in self._load_presentations():
            if p.id == presentation_id:
                return p
        return None

    def require_presentation(self, presentation_id: str) -> Presentation:
        found = self.get_presentation(presentation_id)
        if found is None:
            raise NotFound(presentation_id)
        return found

    def save_presentation(self, presentation: Presentation) -> Presentation:
        with self._lock:
            everything = self._load_presentations()
            for i, existing in enumerate(everything):
                if existing.id == presentation.id:
                    everything[i] = presentation
                    break
            else:
                everything.append(presentation)
            self._write(PRESENTATIONS_KEY, [p.to_document()
                        for p in everything])
        logger.info("Saved presentation %s (%d slides)",
                    presentation.id, len(presentation.slides))
        return presentation

    def delete_presentation(self, presentation_id: str) -> None:
        with self._lock:
            remaining = [p for p in self._load_presentations()
                         if p.id != presentation_id]
            self._write(PRESENTATIONS_KEY, [p.to_document()
                        for p in remaining])

    # --- users and session ---

    def _load_users(self) -> list[User]:
        users: list[User] = []
        for row in self._read_collection(USERS_KEY):
            try:
                users.append(User.model_validate(row))
            except PydanticValidationError:
                logger.warning("Skipping malformed user record")
        return users

    def signup(self, name: str, email: str, password: str) -> User | None:
        """Register a user; returns None when the email is already taken."""
        with self._lock:
            users = self._load_users()
            if any(u.email == email for u in users):
                return None
            user = User(id=new_id(), name=name, email=email)
            # Credentials go first so a user record never exists without them.
            try:
                self.store.set(PASSWORD_KEY_PREFIX +
                               email, hash_password(password))
            except Exception as e:
                logger.error("Saving credentials for %s failed: %s", email, e)
                raise PersistenceWriteFailure(
                    f"Could not save credentials: {e}") from e
            self._write(USERS_KEY, [u.to_document() for u in [*users, user]])
        return user

    def login(self, email: str, password: str) -> User | None:
        user = next((u for u in self._load_users() if u.email == email), None)
        stored = self.store.get(PASSWORD_KEY_PREFIX + email)
        if user is None or not verify_password(password, stored):
            return None
        try:
            self.store.set(SESSION_KEY, json.dumps(user.to_document()))
        except Exception as e:
            logger.error("Saving the session failed: %s", e)
            raise PersistenceWriteFailure(
                f"Could not save session: {e}") from e
        return user

    def logout(self) -> None:
        self._remove(SESSION_KEY)

    def current_user(self) -> User | None:
        raw = self.store.get(SESSION_KEY)
        if not raw:
            return None
        try:
            user = User.model_validate(json.loads(raw))
        except (ValueError, RecursionError, PydanticValidationError):
            logger.warning("Stored session is malformed; ignoring it")
            return None
        if not (user.id and user.name and user.email):
            return None
        return user


def get_store(base_dir: str | None = None) -> KeyValueStore:
    from slideforge.config import settings

    return FileStore(base_dir=base_dir or settings.store_dir)

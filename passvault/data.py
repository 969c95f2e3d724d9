import uuid
import time
from typing import Optional, Any
from datetime import datetime, timezone
from collections.abc import Iterator, Mapping, MutableMapping


class SessionData(MutableMapping[str, str]):
    """Session dict-like object.

    Volatile, per-session key/value area. Nothing stored here outlives the
    session: values are dropped on ``invalidate()`` and once ``max_age``
    seconds have passed since the session was created.

    Only string values are accepted, the same contract as browser
    session storage.
    """

    def __init__(
        self,
        data: Optional[Mapping[str, str]] = None,
        *,
        new: bool = False,
        id: Optional[str] = None,
        identity: Optional[Any] = None,
        max_age: Optional[int] = None,
        created: Optional[int] = None
    ) -> None:
        object.__setattr__(self, '_data', {})
        # If new, mark as changed so it gets saved
        self._changed = True if new else False
        # Unique ID:
        self._id_ = id or uuid.uuid4().hex
        # Session Identity
        self._identity = identity or self._id_
        self._new = new if data else True
        self._max_age = max_age
        now = int(time.time())
        self._created = created if created is not None else now
        self.__created__ = datetime.fromtimestamp(self._created, timezone.utc)
        if data is not None:
            for key, value in data.items():
                self._check_value(key, value)
            self._data.update(data)

    def __repr__(self) -> str:
        # values may hold key material; never render them
        return (
            f'<Vault-Session [new:{self.new}, created:{self.created}, '
            f'expired:{self.expired}] keys={list(self._data.keys())}>'
        )

    @staticmethod
    def _check_value(key: str, value: Any) -> None:
        if not isinstance(key, str):
            raise TypeError(f"Session keys must be str, got {type(key).__name__}")
        if not isinstance(value, str):
            raise TypeError(
                f"Session values must be str, got {type(value).__name__}"
            )

    # --- Properties ---

    @property
    def new(self) -> bool:
        return self._new

    @property
    def logon_time(self) -> datetime:
        return self.__created__

    @property
    def session_id(self) -> str:
        return self._id_

    @property
    def identity(self) -> Optional[Any]:
        return self._identity

    @property
    def created(self) -> int:
        return self._created

    @property
    def empty(self) -> bool:
        return not bool(self._data)

    @property
    def max_age(self) -> Optional[int]:
        return self._max_age

    @max_age.setter
    def max_age(self, value: Optional[int]) -> None:
        self._max_age = value

    @property
    def expired(self) -> bool:
        """True once the session has outlived ``max_age``."""
        if self._max_age is None:
            return False
        return int(time.time()) - self._created > self._max_age

    @property
    def is_changed(self) -> bool:
        return self._changed

    @is_changed.setter
    def is_changed(self, value: bool) -> None:
        self._changed = value

    def changed(self) -> None:
        self._changed = True

    def session_data(self) -> dict:
        """Return a copy of the stored values."""
        return dict(self._data)

    def invalidate(self) -> None:
        """Clear all session data (end of session)."""
        self._changed = True
        self._data = {}

    # --- Magic Methods ---

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._data))

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __setitem__(self, key: str, value: str) -> None:
        self._check_value(key, value)
        self._data[key] = value
        self._changed = True

    def __delitem__(self, key: str) -> None:
        del self._data[key]
        self._changed = True

    def __setattr__(self, key: str, value: Any) -> None:
        if key.startswith('_') or isinstance(
            getattr(type(self), key, None), property
        ):
            object.__setattr__(self, key, value)
        else:
            raise AttributeError(
                f"Use item access to store session values: session[{key!r}]"
            )

"""
Login lockout state machine.

A user is OPEN (is_locked False) or LOCKED (is_locked True, locked_time set).
Every login attempt runs through evaluate_attempt(), which mutates the user's
login_attempts / is_locked / locked_time in place and returns a LoginOutcome.
The caller persists the user afterwards and must hold the per-user lock
(DBStorage.user_lock) for the whole read-evaluate-save sequence.

- LOCKED and the lock has aged >= lock_minutes: unlock, reset the counter, then
  check the password in the same attempt (unlocking alone grants nothing).
- LOCKED and still fresh: reject with the remaining minutes, nothing changes,
  the password is not checked.
- OPEN, right password: counter back to 0, success.
- OPEN, wrong password: counter + 1, lock once it reaches max_attempts.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from utils.security import verify_password


@dataclass(frozen=True)
class LockoutPolicy:
    max_attempts: int = 3
    lock_minutes: int = 15

    @classmethod
    def from_config(cls, config) -> "LockoutPolicy":
        return cls(
            max_attempts=int(config.get("LOGIN_MAX_ATTEMPTS", 3)),
            lock_minutes=int(config.get("LOCKOUT_MINUTES", 15)),
        )


class LoginStatus(enum.Enum):
    SUCCESS = "success"
    UNKNOWN_USER = "unknown_user"
    LOCKED = "locked"
    INVALID_PASSWORD = "invalid_password"


@dataclass(frozen=True)
class LoginOutcome:
    status: LoginStatus
    # attempts left before the account locks (INVALID_PASSWORD only)
    remaining_attempts: int = 0
    # minutes until the lock expires (LOCKED, or INVALID_PASSWORD that just locked)
    remaining_minutes: int = 0
    # the attempt started by releasing an expired lock
    unlocked: bool = False

    @property
    def ok(self) -> bool:
        return self.status is LoginStatus.SUCCESS

    @property
    def locked_now(self) -> bool:
        """This attempt was the one that locked the account."""
        return self.status is LoginStatus.INVALID_PASSWORD and self.remaining_attempts == 0


def utcnow() -> datetime:
    """Naive UTC, matching what users.locked_time stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def minutes_since(then: datetime, now: datetime) -> int:
    """Whole minutes elapsed, rounded down."""
    return int((_naive_utc(now) - _naive_utc(then)).total_seconds() // 60)


def lock_remaining_minutes(user, policy: LockoutPolicy, now: datetime) -> Optional[int]:
    """
    Minutes left on the user's lock, or None when the user is not locked or
    the lock has expired.
    """
    if not user.is_locked:
        return None
    if user.locked_time is None:
        # locked without a timestamp cannot be aged; treat as expired
        return None
    elapsed = minutes_since(user.locked_time, now)
    if elapsed >= policy.lock_minutes:
        return None
    return policy.lock_minutes - elapsed


def unlock(user) -> None:
    user.is_locked = False
    user.login_attempts = 0
    user.locked_time = None


def record_success(user) -> None:
    unlock(user)


def record_failure(user, policy: LockoutPolicy, now: datetime) -> None:
    user.login_attempts = (user.login_attempts or 0) + 1
    if user.login_attempts >= policy.max_attempts:
        user.is_locked = True
        user.locked_time = _naive_utc(now)


def evaluate_attempt(
    user,
    password: str,
    policy: LockoutPolicy,
    now: Optional[datetime] = None,
    verify: Callable[[str, str], bool] = verify_password,
) -> LoginOutcome:
    """Run one login attempt through the lockout rules. See module docstring."""
    if user is None:
        return LoginOutcome(LoginStatus.UNKNOWN_USER)

    now = now or utcnow()
    unlocked = False
    if user.is_locked:
        remaining = lock_remaining_minutes(user, policy, now)
        if remaining is not None:
            return LoginOutcome(LoginStatus.LOCKED, remaining_minutes=remaining)
        unlock(user)
        unlocked = True

    if verify(password, user.password_hash):
        record_success(user)
        return LoginOutcome(LoginStatus.SUCCESS, unlocked=unlocked)

    record_failure(user, policy, now)
    if user.is_locked:
        return LoginOutcome(
            LoginStatus.INVALID_PASSWORD,
            remaining_attempts=0,
            remaining_minutes=policy.lock_minutes,
            unlocked=unlocked,
        )
    return LoginOutcome(
        LoginStatus.INVALID_PASSWORD,
        remaining_attempts=policy.max_attempts - user.login_attempts,
        unlocked=unlocked,
    )

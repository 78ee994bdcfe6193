"""Directory member records and their conversion from API responses."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

_INTEGER = re.compile(r"[+-]?[0-9]+")


class UserGender(IntEnum):
    """A member's gender."""

    UNSPECIFIED = 0
    MALE = 1
    FEMALE = 2


class UserStatus(IntEnum):
    """A member's activation status."""

    ACTIVATED = 1
    DEACTIVATED = 2
    UNACTIVATED = 4


@dataclass(frozen=True)
class UserDeptInfo:
    """A member's place in one department."""

    dept_id: int
    order: int = 0
    is_leader: bool = False


@dataclass(frozen=True)
class UserIdentityInfo:
    """Identity of a visiting user, resolved from an OAuth code."""

    user_id: str = ""
    open_id: str = ""
    device_id: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> UserIdentityInfo:
        """Build from a response object with ``UserId``/``OpenId``/``DeviceId``."""
        return cls(
            user_id=data.get("UserId", ""),
            open_id=data.get("OpenId", ""),
            device_id=data.get("DeviceId", ""),
        )


def reshape_dept_info(
    ids: Sequence[int],
    orders: Sequence[int],
    leader_statuses: Sequence[int],
) -> list[UserDeptInfo]:
    """Zip the parallel department arrays of a member record.

    ``leader_statuses`` may be empty, in which case nobody is a leader.
    """
    if len(ids) != len(orders):
        raise ValueError(
            f"server API breakage: len(DeptIDs) ({len(ids)}) != len(DeptOrder) ({len(orders)})"
        )
    if leader_statuses and len(ids) != len(leader_statuses):
        raise ValueError(
            f"server API breakage: len(DeptIDs) ({len(ids)}) "
            f"!= len(IsLeaderInDept) ({len(leader_statuses)})"
        )
    leaders = [status != 0 for status in leader_statuses] or [False] * len(ids)
    return [
        UserDeptInfo(dept_id=dept_id, order=order, is_leader=leader)
        for dept_id, order, leader in zip(ids, orders, leaders)
    ]


def _enum_or_int(enum_type: type[IntEnum], value: int) -> IntEnum | int:
    try:
        return enum_type(value)
    except ValueError:
        return value


def user_gender_from_str(value: str) -> UserGender | int:
    """Parse the decimal gender string of a member record.

    Values outside the known genders are returned as plain integers.
    """
    if not _INTEGER.fullmatch(value):
        raise ValueError(f"gender string parse failed: invalid syntax: {value!r}")
    return _enum_or_int(UserGender, int(value))


@dataclass(frozen=True)
class UserInfo:
    """A directory member."""

    user_id: str
    name: str = ""
    position: str = ""
    departments: list[UserDeptInfo] = field(default_factory=list)
    mobile: str = ""
    gender: UserGender | int = UserGender.UNSPECIFIED
    email: str = ""
    avatar_url: str = ""
    telephone: str = ""
    is_enabled: bool = False
    alias: str = ""
    status: UserStatus | int = 0
    qr_code_url: str = ""

    @classmethod
    def from_detail(cls, detail: Mapping[str, Any]) -> UserInfo:
        """Build from a member detail object as returned by the directory API."""
        departments = reshape_dept_info(
            detail.get("department") or [],
            detail.get("order") or [],
            detail.get("is_leader_in_dept") or [],
        )
        return cls(
            user_id=detail.get("userid", ""),
            name=detail.get("name", ""),
            position=detail.get("position", ""),
            departments=departments,
            mobile=detail.get("mobile", ""),
            gender=user_gender_from_str(str(detail.get("gender", ""))),
            email=detail.get("email", ""),
            avatar_url=detail.get("avatar", ""),
            telephone=detail.get("telephone", ""),
            is_enabled=detail.get("enable", 0) != 0,
            alias=detail.get("alias", ""),
            status=_enum_or_int(UserStatus, int(detail.get("status", 0))),
            qr_code_url=detail.get("qr_code", ""),
        )
"""
User ORM Model
==============

The ``User`` ORM model represents a portal account. It maps to the
``tbl_users`` table and contains identity, role and credential information.

Key features
~~~~~~~~~~~~
- Opaque text primary key (``id``) so client-generated and seeded ids coexist
- Unique email address
- Role tier (``STUDENT``, ``ALUMNI``, ``FACULTY``, ``ADMIN``)
- Optional bcrypt password hash (``password_hash``)
- Timezone-aware ``joined_at`` timestamp

"""

from campus_portal.database.config.connection_engine import declarativeBase
from campus_portal.database.entities.timestamps import to_datetime, to_iso, utcnow
from sqlalchemy import VARCHAR, TEXT, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime

class User(declarativeBase):
    """
    ORM model for the `tbl_users` table.

    Attributes
    ----------
    id : str
        Primary key. Opaque identifier of the user.
    email : str
        Email address, unique across users (stored lower-cased).
    name : str
        Display name.
    role : str
        Role tier (STUDENT / ALUMNI / FACULTY / ADMIN).
    avatar : str | None
        Optional avatar URL or data URL.
    password_hash : str | None
        Hashed password (never returned by the API).
    department : str | None
        Faculty / department the user belongs to.
    joined_at : datetime
        Registration timestamp (UTC).
    """

    __tablename__ = "tbl_users"

    id: Mapped[str] = mapped_column(TEXT, primary_key=True)
    """Primary key. Opaque id of the user."""

    email: Mapped[str] = mapped_column(VARCHAR(255), unique=True, nullable=False)
    """Email address of the user (unique)."""

    name: Mapped[str] = mapped_column(TEXT, nullable=False)
    """Display name."""

    role: Mapped[str] = mapped_column(TEXT, nullable=False)
    """Role tier assigned to the user."""

    avatar: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    """Optional avatar."""

    password_hash: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    """Hashed password of the user."""

    department: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    """Optional department name."""

    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    """Registration timestamp."""

    def __init__(
        self,
        user_id: str,
        email: str,
        name: str,
        role: str,
        joined_at,
        password_hash: str | None = None,
        department: str | None = None,
        avatar: str | None = None,
    ):
        """
        Initialize a new User object.

        Parameters
        ----------
        user_id : str
            Identifier of the user.
        email : str
            Email address (expected already normalized).
        name : str
            Display name.
        role : str
            Role tier.
        joined_at : datetime | str
            Registration timestamp; accepts a datetime or ISO8601 string.
        password_hash : str | None
            Already-hashed password.
        department : str | None
            Optional department.
        avatar : str | None
            Optional avatar.
        """
        self.id = user_id
        self.email = email
        self.name = name
        self.role = role
        self.password_hash = password_hash
        self.department = department
        self.avatar = avatar
        self.joined_at = to_datetime(joined_at)

    def to_dict(self, include_password: bool = False) -> dict:
        """
        Return the camelCase wire representation of the user.

        Parameters
        ----------
        include_password : bool
            Include ``passwordHash`` (backup export only).
        """
        data = {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "avatar": self.avatar,
            "department": self.department,
            "joinedAt": to_iso(self.joined_at),
        }
        if include_password:
            data["passwordHash"] = self.password_hash
        return data

    def __str__(self) -> str:
        return f"User: id:{self.id}, email: {self.email}, role: {self.role}"

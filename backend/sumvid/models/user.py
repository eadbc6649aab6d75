"""User model."""

from datetime import date
from typing import Optional

from sqlalchemy import CheckConstraint, Date, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from sumvid.models._base import Base, TimestampMixin


class User(Base, TimestampMixin):
    """User account with its daily usage counters and subscription entitlement.

    Usage columns are written by the quota service, entitlement columns by the
    Stripe webhook processor. Both use targeted UPDATEs so neither clobbers the
    other.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("usage_count >= 0", name="ck_users_usage_count_non_negative"),
        CheckConstraint("usage_limit > 0", name="ck_users_usage_limit_positive"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    usage_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    usage_limit: Mapped[int] = mapped_column(
        Integer, nullable=False, default=10, server_default=text("10")
    )
    last_reset_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    subscription_status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="freemium", server_default="freemium"
    )
    stripe_customer_id: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True, index=True
    )
    stripe_subscription_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

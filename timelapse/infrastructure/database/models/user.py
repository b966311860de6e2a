"""User and identity database models."""

from uuid import UUID, uuid4

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from timelapse.domain.entities.user import Identity, User
from timelapse.infrastructure.database.models.base import Base, TimestampMixin


class UserModel(Base, TimestampMixin):
    """SQLAlchemy model for users table."""

    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True, default=uuid4)

    identities: Mapped[list["UserIdentityModel"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="UserIdentityModel.position",
    )

    def to_entity(self) -> User:
        """Convert to domain entity."""
        return User(
            id=self.id,
            identities=[identity.to_entity() for identity in self.identities],
            created_at=self.created_at,
        )


class UserIdentityModel(Base, TimestampMixin):
    """One login identity of a user; (issuer, subject_id) is globally unique."""

    __tablename__ = "user_identities"

    id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    issuer: Mapped[str] = mapped_column(String(512), nullable=False)
    subject_id: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, default="")
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    user: Mapped[UserModel] = relationship(back_populates="identities")

    __table_args__ = (
        UniqueConstraint("issuer", "subject_id", name="user_identities_issuer_subject_unique"),
    )

    def to_entity(self) -> Identity:
        return Identity(issuer=self.issuer, subject_id=self.subject_id, email=self.email)

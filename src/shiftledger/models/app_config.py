"""Single-row application config holding the shift cutoff."""

from datetime import datetime

from sqlalchemy import DateTime, String, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column

from shiftledger.core.db import Base

MAIN_CONFIG_KEY = "main"


class AppConfig(Base):
    """Global ledger settings.

    ``last_shift_report_time`` is the cutoff: it always equals ``ended_at``
    of the most recently closed shift, or None before the first close.
    """

    __tablename__ = "app_config"

    key: Mapped[str] = mapped_column(String(50), primary_key=True, default=MAIN_CONFIG_KEY)

    last_shift_report_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=False),
        nullable=True,
    )

    @staticmethod
    async def load(db: AsyncSession) -> "AppConfig":
        """Fetch the main config row, creating it (pending) on first use."""
        result = await db.execute(select(AppConfig).where(AppConfig.key == MAIN_CONFIG_KEY))
        config = result.scalar_one_or_none()
        if config is None:
            config = AppConfig(key=MAIN_CONFIG_KEY, last_shift_report_time=None)
            db.add(config)
        return config

    @staticmethod
    async def read_cutoff(db: AsyncSession) -> datetime | None:
        """Current cutoff, without creating the config row."""
        stmt = select(AppConfig.last_shift_report_time).where(AppConfig.key == MAIN_CONFIG_KEY)
        return await db.scalar(stmt)

    def __repr__(self) -> str:
        return f"<AppConfig(key={self.key}, last_shift_report_time={self.last_shift_report_time})>"

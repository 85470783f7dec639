"""
SequenceCounter -- named monotonic counters.

Each row holds the last value handed out for one sequence name.  Written
only by SequenceService; read by selectors to answer "which id is next".
"""

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from provenance_kernel.db.base import Base

BATCH_ID_SEQUENCE = "batch_id"


class SequenceCounter(Base):
    """
    Sequence counter table.

    Each row represents a named sequence with its last allocated value.
    """

    __tablename__ = "sequence_counters"

    name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
    )

    current_value: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
    )

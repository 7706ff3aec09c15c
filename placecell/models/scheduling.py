from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from placecell.db.postgres import Base


class CampusDrive(Base):
    """A scheduled recruiting event. While scheduled, the row is also the lock on its date."""
    __tablename__ = "campus_drives"
    __table_args__ = (
        # One scheduled drive per calendar date, whatever the company
        Index(
            "uq_campus_drives_scheduled_date",
            "drive_date",
            unique=True,
            postgresql_where=text("status = 'scheduled'"),
            sqlite_where=text("status = 'scheduled'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    coordinator_name = Column(String(200), nullable=False)
    drive_date = Column(Date, nullable=False, index=True)
    drive_time = Column(String(20), nullable=True)
    venue = Column(String(200), nullable=True)
    min_cgpa = Column(Float, nullable=True)
    eligible_branches = Column(Text, nullable=True)
    registered_count = Column(Integer, nullable=False, default=0)
    appeared_count = Column(Integer, nullable=False, default=0)
    selected_count = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="scheduled")
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    company = relationship("Company")

    @property
    def company_name(self):
        return self.company.name if self.company else None


class BlockedDate(Base):
    """Closed interval [start_date, end_date] declared by an admin. Ranges may overlap."""
    __tablename__ = "blocked_dates"

    id = Column(Integer, primary_key=True, index=True)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False)
    reason = Column(Text, nullable=False)
    created_by = Column(String(200), nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)


class DateRequest(Base):
    __tablename__ = "date_requests"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="SET NULL"), nullable=True, index=True)
    requested_date = Column(Date, nullable=False, index=True)
    coordinator_name = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="pending")  # pending, approved, rejected
    admin_response = Column(Text, nullable=True)
    responded_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    company = relationship("Company")

    @property
    def company_name(self):
        return self.company.name if self.company else None

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from placecell.db.postgres import Base


class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, index=True)
    website = Column(String(500), nullable=True)
    industry = Column(String(200), nullable=True)
    status = Column(String(20), nullable=False, default="Active")  # Active, Blacklisted
    registration_status = Column(String(20), nullable=False, default="Pending")  # Pending, Submitted
    poc_1st = Column(String(200), nullable=False)
    poc_2nd = Column(String(200), nullable=True)
    hr_name = Column(String(200), nullable=True)
    hr_phone = Column(String(50), nullable=True)
    hr_email = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    # Job-posting fields, filled by hand or from the registration form
    job_roles = Column(Text, nullable=True)
    package_offered = Column(Text, nullable=True)
    eligibility_criteria = Column(Text, nullable=True)
    bond_details = Column(Text, nullable=True)
    job_location = Column(Text, nullable=True)
    selection_process = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    contacts = relationship("CompanyContact", back_populates="company", cascade="all, delete-orphan")


class CompanyContact(Base):
    __tablename__ = "company_contacts"
    __table_args__ = (
        # At most one primary contact per company
        Index(
            "uq_company_contacts_primary",
            "company_id",
            unique=True,
            postgresql_where=text("is_primary"),
            sqlite_where=text("is_primary = 1"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    designation = Column(String(200), nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    is_primary = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    company = relationship("Company", back_populates="contacts")

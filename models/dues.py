from sqlalchemy import Column, Integer, String, Float, Date, Index, func
from database import Base
from models.enums import Category, DueStatus, PaymentStatus
import datetime


class Due(Base):
    __tablename__ = "dues"

    id = Column(Integer, primary_key=True, index=True)

    # --- WHO OWES ---
    person_id = Column(String(50), nullable=False, index=True)   # Roll number or faculty ID
    person_name = Column(String(150), nullable=False)            # Copied at creation, never re-derived
    person_type = Column(String(20), nullable=False)             # Student / Faculty

    # --- WHAT IS OWED ---
    department = Column(String(100), nullable=False, index=True)  # Owning department
    description = Column(String(500), nullable=False)
    amount = Column(Float, nullable=False, default=0.0)
    due_date = Column(Date, nullable=False)
    category = Column(String(20), nullable=False, default=Category.PAYABLE.value)
    due_type = Column(String(50), nullable=False)
    link = Column(String(500), default="")                        # Optional document link

    # --- RESOLUTION STATE ---
    status = Column(String(20), nullable=False, default=DueStatus.PENDING.value)
    payment_status = Column(String(10), nullable=False, default=PaymentStatus.DUE.value)
    clear_date = Column(Date, nullable=True)                      # Set once, when cleared
    date_added = Column(Date, nullable=False, default=datetime.date.today)

    __table_args__ = (
        Index("ix_dues_department_status", "department", "status"),
    )

    @classmethod
    def in_department(cls, name: str):
        """Case-insensitive department match, usable in query filters"""
        return func.lower(func.trim(cls.department)) == name.strip().lower()

    def __repr__(self):
        return f"<Due {self.id} {self.person_id} {self.department} {self.status}/{self.payment_status}>"

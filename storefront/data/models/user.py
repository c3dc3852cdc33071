from sqlalchemy import Column, String
from storefront.data.database import Base

class UserModel(Base):
    __tablename__ = "users"
    # uid issued by the identity provider
    id = Column(String(64), primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    role = Column(String(16), nullable=False, default="client")
